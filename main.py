"""
@description FastAPI 应用入口
@responsibility 初始化应用、集成路由、启动 Steam 日志监听
"""

import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import items, watcher, copy, config, system
from app.api.items import init_items_router
from app.api.watcher import init_watcher_router
from app.api.copy import init_copy_router
from app.api.config import init_config_router
from app.api.system import init_system_router
from app.core.config import load_config
from app.core.database import init_db
from app.schemas.api import ApiResponse, success_response
from app.services.copy_pipeline import CopyPipeline
from app.services.item_registry import ItemRegistry
from app.tasks.log_watcher import LogWatcher
from app.utils.helpers import format_start_time, is_valid_steam_path


config_obj = None
item_registry: Optional[ItemRegistry] = None
log_watcher: Optional[LogWatcher] = None
copy_pipeline: Optional[CopyPipeline] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global config_obj, item_registry, log_watcher, copy_pipeline

    config_obj = load_config()
    logger.remove()
    logger.add(sys.stderr, level=config_obj.log.level.upper())
    logger.info("配置加载完成")

    await init_db()
    logger.info("数据库初始化完成")

    item_registry = ItemRegistry()
    # 默认只关注启动之后的订阅变化
    log_watcher = LogWatcher(
        item_registry.reconcile,
        start_time=format_start_time(),
        poll_interval=config_obj.steam.poll_interval,
    )
    copy_pipeline = CopyPipeline(item_registry, config_obj)

    init_items_router(item_registry, config_obj)
    init_watcher_router(log_watcher, config_obj)
    init_copy_router(copy_pipeline, item_registry, config_obj)
    init_config_router(config_obj)
    init_system_router(log_watcher, copy_pipeline, item_registry)

    if is_valid_steam_path(config_obj.steam.path):
        await log_watcher.start_watching(config_obj.steam.path)
    elif config_obj.steam.path:
        logger.warning(f"未找到 Steam 日志文件: {config_obj.steam.path}，等待重新配置后再开始监听")
    else:
        logger.warning("未配置 Steam 路径，等待配置后再开始监听")

    yield

    if copy_pipeline and copy_pipeline.is_running:
        copy_pipeline.cancel_job()
        logger.info("已请求取消正在进行的拷贝任务")

    if log_watcher:
        await log_watcher.stop_watching()

    logger.info("应用已关闭")


app = FastAPI(
    title="Wallpaper Extractor",
    description="监控 Wallpaper Engine 创意工坊订阅变化并批量提取壁纸文件",
    version="1.0.0",
    lifespan=lifespan,
)


# 全局异常处理器
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """处理 HTTP 异常"""
    logger.info(f"HTTP 异常处理器被调用: {exc.status_code} - {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(
            code=exc.status_code, message=exc.detail, data=None
        ).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """处理请求参数验证错误"""
    logger.info(f"验证错误处理器被调用: {len(exc.errors())} 个错误")
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=ApiResponse(
            code=422, message="请求参数验证失败", data={"errors": errors}
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """处理通用异常"""
    logger.exception(f"服务器内部错误: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=ApiResponse(code=500, message="服务器内部错误", data=None).model_dump(),
    )


app.include_router(items.router, prefix="/api", tags=["items"])
app.include_router(watcher.router, prefix="/api", tags=["watcher"])
app.include_router(copy.router, prefix="/api", tags=["copy"])
app.include_router(config.router, prefix="/api", tags=["config"])
app.include_router(system.router, prefix="/api", tags=["system"])


@app.get("/")
async def root():
    return success_response(
        data={"message": "Wallpaper Extractor API", "version": "1.0.0"},
        message="服务运行中",
    )


@app.get("/health")
async def health_check():
    return success_response(data={"status": "healthy"}, message="健康检查通过")

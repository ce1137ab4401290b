"""
@description 日志监听接口
@responsibility 启动/停止 Steam 日志监听，更新日志过滤起始时间
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException
from loguru import logger

from app.schemas.api import (
    ApiResponse,
    StartWatchRequest,
    UpdateStartTimeRequest,
    WatcherStatusResponse,
    success_response,
)
from app.utils.helpers import is_valid_steam_path

if TYPE_CHECKING:
    from app.core.config import Config
    from app.tasks.log_watcher import LogWatcher

router = APIRouter()

_watcher: "LogWatcher" = None
_config: "Config" = None


def init_watcher_router(watcher: "LogWatcher", config: "Config"):
    global _watcher, _config
    _watcher = watcher
    _config = config


def _watcher_status() -> WatcherStatusResponse:
    return WatcherStatusResponse(
        running=_watcher.is_running,
        steam_path=_watcher.steam_path,
        start_time=_watcher.start_time,
        last_check_time=(
            _watcher.last_check_time.isoformat() if _watcher.last_check_time else None
        ),
    )


@router.post("/watcher/start", response_model=ApiResponse[WatcherStatusResponse])
async def start_watching(request: StartWatchRequest):
    steam_path = request.steam_path or _config.steam.path
    if not steam_path or not steam_path.strip():
        raise HTTPException(status_code=400, detail="请先配置 Steam 路径")
    if not is_valid_steam_path(steam_path):
        raise HTTPException(status_code=400, detail="未找到 Steam 日志文件")

    try:
        await _watcher.start_watching(steam_path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"监听失败: {e}")

    if request.steam_path:
        _config.steam.path = request.steam_path.strip()
        logger.info(f"Steam 路径已更新: {_config.steam.path}")

    return success_response(data=_watcher_status(), message="正在监听 Steam 日志")


@router.post("/watcher/stop", response_model=ApiResponse[WatcherStatusResponse])
async def stop_watching():
    await _watcher.stop_watching()
    return success_response(data=_watcher_status(), message="日志监听已停止")


@router.put("/watcher/start-time", response_model=ApiResponse[WatcherStatusResponse])
async def update_start_time(request: UpdateStartTimeRequest):
    await _watcher.update_start_time(request.start_time)
    return success_response(
        data=_watcher_status(), message=f"起始时间已设置为 {request.start_time}"
    )


@router.get("/watcher/status", response_model=ApiResponse[WatcherStatusResponse])
async def get_watcher_status():
    return success_response(data=_watcher_status(), message="获取监听状态成功")

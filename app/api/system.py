"""
@description 系统状态接口
@responsibility 汇总日志监听、拷贝任务和项目数量的运行状态
"""

from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter

from app.schemas.api import StatusResponse, success_response, ApiResponse

if TYPE_CHECKING:
    from app.tasks.log_watcher import LogWatcher
    from app.services.copy_pipeline import CopyPipeline
    from app.services.item_registry import ItemRegistry

router = APIRouter()

_watcher: Optional["LogWatcher"] = None
_pipeline: Optional["CopyPipeline"] = None
_registry: Optional["ItemRegistry"] = None


def init_system_router(
    watcher: "LogWatcher", pipeline: "CopyPipeline", registry: "ItemRegistry"
):
    global _watcher, _pipeline, _registry
    _watcher = watcher
    _pipeline = pipeline
    _registry = registry


@router.get("/status", response_model=ApiResponse[StatusResponse])
async def get_status():
    watcher_running = _watcher is not None and _watcher.is_running
    copy_running = _pipeline is not None and _pipeline.is_running
    item_count = _registry.total_count if _registry is not None else 0

    last_check_time = None
    if _watcher is not None and _watcher.last_check_time is not None:
        last_check_time = _watcher.last_check_time.isoformat()

    return success_response(
        data=StatusResponse(
            watcher_running=watcher_running,
            copy_running=copy_running,
            item_count=item_count,
            last_check_time=last_check_time,
        ),
        message="获取系统状态成功",
    )

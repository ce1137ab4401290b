"""
@description 批量拷贝接口
@responsibility 启动/取消拷贝任务，查询拷贝状态和拷贝记录
"""

from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from sqlalchemy import select, func

from app.core.database import get_session
from app.models.copy_record import CopyRecord
from app.schemas.api import (
    ApiResponse,
    CopyRecordItem,
    CopyRecordsResponse,
    CopyResult,
    CopyStatusResponse,
    StartCopyRequest,
    StartCopyResponse,
    success_response,
)
from app.schemas.workshop import CopyMode

if TYPE_CHECKING:
    from app.core.config import Config
    from app.services.copy_pipeline import CopyPipeline
    from app.services.item_registry import ItemRegistry

router = APIRouter()

_pipeline: "CopyPipeline" = None
_registry: "ItemRegistry" = None
_config: "Config" = None


def init_copy_router(
    pipeline: "CopyPipeline", registry: "ItemRegistry", config: "Config"
):
    global _pipeline, _registry, _config
    _pipeline = pipeline
    _registry = registry
    _config = config


def _on_copy_complete(success_count: int, failed_count: int) -> None:
    logger.info(f"拷贝完成: 成功 {success_count} 项, 失败 {failed_count} 项")


@router.post("/copy/start", response_model=ApiResponse[StartCopyResponse])
async def start_copy(request: StartCopyRequest):
    if _pipeline.is_running:
        raise HTTPException(status_code=409, detail="拷贝任务正在进行中")

    copy_path = request.copy_path or _config.copy_settings.path
    video_mode = (
        request.video_mode
        if request.video_mode is not None
        else _config.copy_settings.video_mode
    )
    mode = CopyMode.from_video_mode(video_mode)

    try:
        job_config = _pipeline.validate_job(copy_path, mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error(f"创建拷贝目录失败: {e}")
        raise HTTPException(status_code=500, detail=f"创建拷贝目录失败: {e}")

    _config.copy_settings.path = str(job_config.destination_root)
    _config.copy_settings.video_mode = video_mode

    _registry.reset_non_success_statuses()
    item_count = _registry.compute_actual_copy_count()

    try:
        _pipeline.start_job(job_config, _on_copy_complete)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return success_response(
        data=StartCopyResponse(
            mode=mode.value,
            destination=str(job_config.destination_root),
            item_count=item_count,
        ),
        message=f"开始拷贝 {item_count} 个项目",
    )


@router.post("/copy/cancel", response_model=ApiResponse[CopyStatusResponse])
async def cancel_copy():
    _pipeline.cancel_job()
    return success_response(data=_copy_status(), message="已请求取消拷贝任务")


@router.get("/copy/status", response_model=ApiResponse[CopyStatusResponse])
async def get_copy_status():
    return success_response(data=_copy_status(), message="获取拷贝状态成功")


def _copy_status() -> CopyStatusResponse:
    last_result = _pipeline.last_result
    return CopyStatusResponse(
        running=_pipeline.is_running,
        copy_remaining=_registry.compute_actual_copy_count(),
        last_result=CopyResult(**last_result) if last_result else None,
    )


@router.get("/copy/records", response_model=CopyRecordsResponse)
async def get_copy_records(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    status: Optional[str] = Query(None, description="筛选状态"),
):
    async with get_session() as session:
        count_stmt = select(func.count()).select_from(CopyRecord)
        if status:
            count_stmt = count_stmt.where(CopyRecord.status == status)
        count_result = await session.execute(count_stmt)
        total = count_result.scalar()

        stmt = select(CopyRecord).order_by(CopyRecord.created_at.desc())
        if status:
            stmt = stmt.where(CopyRecord.status == status)
        stmt = stmt.offset((page - 1) * page_size).limit(page_size)

        result = await session.execute(stmt)
        records = result.scalars().all()

        record_items = [
            CopyRecordItem(
                id=record.id,
                workshop_id=record.workshop_id or "",
                source_path=record.source_path or "",
                target_path=record.target_path or "",
                copy_mode=record.copy_mode or "",
                status=record.status or "",
                error_message=record.error_message,
                created_at=record.created_at,
            )
            for record in records
        ]

        return CopyRecordsResponse(total=total, records=record_items)

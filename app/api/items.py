"""
@description 创意工坊项目接口
@responsibility 查询当前跟踪的项目列表，提供打开源目录和创意工坊页面所需的信息
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from app.schemas.api import (
    ApiResponse,
    ItemListResponse,
    ItemPageResponse,
    ItemSourceResponse,
    WorkshopItem,
    success_response,
)
from app.utils.helpers import resolve_workshop_dir, workshop_page_url

if TYPE_CHECKING:
    from app.core.config import Config
    from app.services.item_registry import ItemRegistry

router = APIRouter()

_registry: "ItemRegistry" = None
_config: "Config" = None


def init_items_router(registry: "ItemRegistry", config: "Config"):
    global _registry, _config
    _registry = registry
    _config = config


def _get_item_or_404(item_id: str):
    item = _registry.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"项目 '{item_id}' 不存在")
    return item


@router.get("/items", response_model=ApiResponse[ItemListResponse])
async def list_items():
    items = [WorkshopItem.from_tracked(item) for item in _registry.items()]
    return success_response(
        data=ItemListResponse(
            total=len(items),
            copy_remaining=_registry.compute_actual_copy_count(),
            items=items,
        ),
        message="获取项目列表成功",
    )


@router.get("/items/{item_id}", response_model=ApiResponse[WorkshopItem])
async def get_item(item_id: str):
    item = _get_item_or_404(item_id)
    return success_response(data=WorkshopItem.from_tracked(item), message="获取项目成功")


@router.get("/items/{item_id}/source", response_model=ApiResponse[ItemSourceResponse])
async def get_item_source(item_id: str):
    _get_item_or_404(item_id)

    steam_path = _config.steam.path
    if not steam_path:
        raise HTTPException(status_code=400, detail="请先配置 Steam 路径")

    folder_path = resolve_workshop_dir(steam_path, item_id)
    return success_response(
        data=ItemSourceResponse(
            id=item_id, folder_path=str(folder_path), exists=folder_path.is_dir()
        ),
        message="获取源目录成功" if folder_path.is_dir() else f"目录不存在: {folder_path}",
    )


@router.get("/items/{item_id}/page", response_model=ApiResponse[ItemPageResponse])
async def get_item_page(item_id: str):
    if not item_id.isdigit():
        raise HTTPException(status_code=400, detail=f"无效的项目 ID: {item_id}")
    return success_response(
        data=ItemPageResponse(id=item_id, url=workshop_page_url(item_id)),
        message="获取创意工坊页面成功",
    )

"""
@description 配置管理接口
@responsibility 处理配置的查询和修改操作
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from app.schemas.api import (
    ConfigResponse,
    CopyConfigResponse,
    SteamConfigResponse,
    UpdateConfigRequest,
    UpdateConfigResponse,
)
from app.utils.helpers import is_valid_steam_path

if TYPE_CHECKING:
    from app.core.config import Config

router = APIRouter()

_config: "Config" = None


def init_config_router(config: "Config"):
    global _config
    _config = config


@router.get("/config", response_model=ConfigResponse)
async def get_config():
    return ConfigResponse(
        steam=SteamConfigResponse(
            path=_config.steam.path,
            poll_interval=_config.steam.poll_interval,
        ),
        copy_settings=CopyConfigResponse(
            path=_config.copy_settings.path,
            video_mode=_config.copy_settings.video_mode,
            video_formats=_config.copy_settings.video_formats,
        ),
    )


@router.put("/config", response_model=UpdateConfigResponse)
async def update_config(request: UpdateConfigRequest):
    # 空白路径不覆盖已有配置
    if request.steam_path is not None and request.steam_path.strip():
        if not is_valid_steam_path(request.steam_path):
            raise HTTPException(status_code=400, detail="未找到 Steam 日志文件")
        _config.steam.path = request.steam_path.strip()

    if request.copy_path is not None and request.copy_path.strip():
        _config.copy_settings.path = request.copy_path.strip()

    if request.video_mode is not None:
        _config.copy_settings.video_mode = request.video_mode

    return UpdateConfigResponse(message="配置更新成功")

"""
@description API 请求/响应模型
@responsibility 定义所有 API 接口的数据结构
"""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from app.schemas.workshop import CopyStatus, TrackedItem
from app.utils.helpers import is_valid_time_text


class WorkshopItem(BaseModel):
    id: str = Field(..., description="创意工坊项目 ID")
    timestamp: str = Field(..., description="最近一次状态变化时间")
    subscribed: bool = Field(..., description="是否订阅")
    subscribe_status: str = Field(..., description="订阅状态文本")
    copy_status: CopyStatus = Field(..., description="拷贝状态")
    copy_status_message: str = Field("", description="拷贝失败原因")
    copy_status_text: str = Field(..., description="拷贝状态文本")

    @classmethod
    def from_tracked(cls, item: TrackedItem) -> "WorkshopItem":
        return cls(
            id=item.id,
            timestamp=item.timestamp,
            subscribed=item.subscribed,
            subscribe_status=item.subscribe_status,
            copy_status=item.copy_status,
            copy_status_message=item.copy_status_message,
            copy_status_text=item.copy_status_text,
        )


class ItemListResponse(BaseModel):
    total: int = Field(..., description="项目总数")
    copy_remaining: int = Field(..., description="仍需拷贝的项目数量")
    items: list[WorkshopItem] = Field(..., description="项目列表")


class ItemSourceResponse(BaseModel):
    id: str = Field(..., description="创意工坊项目 ID")
    folder_path: str = Field(..., description="壁纸源目录")
    exists: bool = Field(..., description="源目录是否存在")


class ItemPageResponse(BaseModel):
    id: str = Field(..., description="创意工坊项目 ID")
    url: str = Field(..., description="创意工坊页面地址")


class StartWatchRequest(BaseModel):
    steam_path: Optional[str] = Field(
        None, description="Steam 安装目录（可选，默认使用配置中的路径）"
    )


class UpdateStartTimeRequest(BaseModel):
    start_time: str = Field(..., description="起始时间（yyyy-MM-dd HH:mm:ss）")

    @field_validator("start_time")
    @classmethod
    def _check_start_time(cls, value: str) -> str:
        if not is_valid_time_text(value):
            raise ValueError("时间格式必须为 yyyy-MM-dd HH:mm:ss")
        return value


class WatcherStatusResponse(BaseModel):
    running: bool = Field(..., description="监听是否运行中")
    steam_path: Optional[str] = Field(None, description="监听的 Steam 目录")
    start_time: Optional[str] = Field(None, description="日志过滤起始时间")
    last_check_time: Optional[str] = Field(None, description="上次检测时间")


class StartCopyRequest(BaseModel):
    copy_path: Optional[str] = Field(
        None, description="拷贝目标目录（可选，默认使用配置中的路径）"
    )
    video_mode: Optional[bool] = Field(
        None, description="拷贝模式（true=视频文件，false=整个目录，默认使用配置）"
    )


class StartCopyResponse(BaseModel):
    mode: str = Field(..., description="拷贝模式")
    destination: str = Field(..., description="拷贝目标目录")
    item_count: int = Field(..., description="本次需要拷贝的项目数量")


class CopyResult(BaseModel):
    success_count: int = Field(..., description="成功数量")
    failed_count: int = Field(..., description="失败数量")
    cancelled: bool = Field(False, description="是否被取消")


class CopyStatusResponse(BaseModel):
    running: bool = Field(..., description="拷贝任务是否运行中")
    copy_remaining: int = Field(..., description="仍需拷贝的项目数量")
    last_result: Optional[CopyResult] = Field(None, description="上次拷贝结果")


class CopyRecordItem(BaseModel):
    id: int = Field(..., description="记录 ID")
    workshop_id: str = Field(..., description="创意工坊项目 ID")
    source_path: str = Field(..., description="源路径")
    target_path: str = Field(..., description="目标路径")
    copy_mode: str = Field(..., description="拷贝模式")
    status: str = Field(..., description="拷贝状态")
    error_message: Optional[str] = Field(None, description="错误信息")
    created_at: datetime = Field(..., description="创建时间")


class CopyRecordsResponse(BaseModel):
    total: int = Field(..., description="记录总数")
    records: list[CopyRecordItem] = Field(..., description="拷贝记录列表")


class SteamConfigResponse(BaseModel):
    path: Optional[str] = Field(None, description="Steam 安装目录")
    poll_interval: float = Field(..., description="日志轮询间隔（秒）")


class CopyConfigResponse(BaseModel):
    path: Optional[str] = Field(None, description="拷贝目标目录")
    video_mode: bool = Field(..., description="拷贝模式")
    video_formats: list[str] = Field(..., description="视频文件格式")


class ConfigResponse(BaseModel):
    steam: SteamConfigResponse = Field(..., description="Steam 配置")
    copy_settings: CopyConfigResponse = Field(..., description="拷贝配置")


class UpdateConfigRequest(BaseModel):
    steam_path: Optional[str] = Field(None, description="Steam 安装目录")
    copy_path: Optional[str] = Field(None, description="拷贝目标目录")
    video_mode: Optional[bool] = Field(None, description="拷贝模式")


class UpdateConfigResponse(BaseModel):
    message: str = Field(..., description="操作消息")


class StatusResponse(BaseModel):
    watcher_running: bool = Field(..., description="日志监听是否运行中")
    copy_running: bool = Field(..., description="拷贝任务是否运行中")
    item_count: int = Field(..., description="跟踪的项目数量")
    last_check_time: Optional[str] = Field(None, description="上次检测时间")


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """统一 API 响应格式"""

    code: int = Field(..., description="响应码（0=成功，非0=错误）")
    message: str = Field(..., description="响应消息")
    data: Optional[T] = Field(None, description="响应数据")


def success_response(data: T, message: str = "操作成功") -> ApiResponse[T]:
    """创建成功响应"""
    return ApiResponse(code=0, message=message, data=data)


def error_response(code: int, message: str, data: Optional[T] = None) -> ApiResponse[T]:
    """创建错误响应"""
    return ApiResponse(code=code, message=message, data=data)

"""
@description 创意工坊领域数据模型
@responsibility 定义订阅记录、跟踪项、拷贝状态、拷贝模式及拷贝任务配置
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class WorkshopRecord(BaseModel):
    """一次日志解析得到的创意工坊项目订阅状态"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="创意工坊项目 ID")
    timestamp: str = Field(..., description="最近一次状态变化的日志时间")
    subscribed: bool = Field(..., description="True=已订阅，False=已取消订阅")


class CopyStatus(str, Enum):
    """拷贝状态"""

    NOT_COPIED = "not_copied"
    COPYING = "copying"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def display_name(self) -> str:
        return _COPY_STATUS_DISPLAY[self]


_COPY_STATUS_DISPLAY = {
    CopyStatus.NOT_COPIED: "未拷贝",
    CopyStatus.COPYING: "拷贝中",
    CopyStatus.SUCCESS: "拷贝成功",
    CopyStatus.FAILED: "拷贝失败",
}


class CopyMode(str, Enum):
    """拷贝模式"""

    VIDEO_FILE = "video"
    FULL_DIRECTORY = "directory"

    @classmethod
    def from_video_mode(cls, video_mode: bool) -> "CopyMode":
        return cls.VIDEO_FILE if video_mode else cls.FULL_DIRECTORY


class TrackedItem(BaseModel):
    """
    注册表中跟踪的项目

    不可变对象：每次更新都由注册表生成新实例替换原槽位，version 随之递增
    """

    model_config = ConfigDict(frozen=True)

    record: WorkshopRecord
    copy_status: CopyStatus = CopyStatus.NOT_COPIED
    copy_status_message: str = ""
    version: int = 0

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def timestamp(self) -> str:
        return self.record.timestamp

    @property
    def subscribed(self) -> bool:
        return self.record.subscribed

    @property
    def subscribe_status(self) -> str:
        return "已订阅" if self.subscribed else "已取消订阅"

    @property
    def copy_status_text(self) -> str:
        if self.copy_status_message:
            return f"{self.copy_status.display_name}: {self.copy_status_message}"
        return self.copy_status.display_name


class CopyJobConfig(BaseModel):
    """一次批量拷贝任务的配置"""

    model_config = ConfigDict(frozen=True)

    mode: CopyMode
    destination_root: Path
    steam_path: str

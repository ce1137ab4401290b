"""
@description 配置管理模块
@responsibility 加载和验证 config.yaml，支持环境变量覆盖
"""

import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_VIDEO_FORMATS = ["mp4", "avi", "mov", "wmv", "flv", "mkv"]


class SteamConfig(BaseModel):
    """Steam 相关配置"""

    path: Optional[str] = Field(None, description="Steam 安装目录")
    poll_interval: float = Field(default=1.0, description="日志轮询间隔（秒）")

    @field_validator("poll_interval")
    @classmethod
    def _check_poll_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("poll_interval 必须大于 0")
        return value


class CopyConfig(BaseModel):
    """拷贝相关配置"""

    path: Optional[str] = Field(None, description="拷贝目标目录")
    video_mode: bool = Field(
        default=True, description="拷贝模式（true=只拷贝视频文件，false=拷贝整个目录）"
    )
    video_formats: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VIDEO_FORMATS),
        description="视频文件格式列表（不含点号）",
    )

    @field_validator("video_formats")
    @classmethod
    def _normalize_formats(cls, value: list[str]) -> list[str]:
        return [fmt.strip().lstrip(".").lower() for fmt in value if fmt.strip()]


class LogConfig(BaseModel):
    """日志配置"""

    level: str = Field(default="INFO", description="日志级别")


class Config(BaseModel):
    """全局配置"""

    steam: SteamConfig = Field(default_factory=SteamConfig, description="Steam 配置")
    copy_settings: CopyConfig = Field(
        default_factory=CopyConfig, alias="copy", description="拷贝配置"
    )
    log: LogConfig = Field(default_factory=LogConfig, description="日志配置")

    model_config = {"populate_by_name": True}


def get_config_path() -> Path:
    """获取配置文件路径"""
    # 优先使用 CONFIG_PATH 环境变量，否则使用项目根目录的 config.yaml
    if config_path_str := os.environ.get("CONFIG_PATH"):
        return Path(config_path_str)
    return Path(__file__).parent.parent.parent / "config.yaml"


def load_config() -> Config:
    """加载配置文件并应用环境变量覆盖"""
    config_path = get_config_path()

    # 配置文件不存在时生成模板并退出
    if not config_path.exists():
        _generate_config_template(config_path)
        print(f"错误: 配置文件不存在: {config_path}")
        print(f"已生成配置模板: {config_path.parent / 'config.example.yaml'}")
        sys.exit(1)

    with open(config_path, encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    config = Config(**config_data)

    # 应用环境变量覆盖
    if steam_path := os.environ.get("STEAM_PATH"):
        config.steam.path = steam_path
    if copy_path := os.environ.get("COPY_PATH"):
        config.copy_settings.path = copy_path

    return config


def _generate_config_template(config_path: Path) -> None:
    """生成配置模板文件"""
    template_path = config_path.parent / "config.example.yaml"

    if template_path.exists():
        return

    template_content = """# Steam 相关配置
steam:
  # Steam 安装目录，监听 {path}/logs/workshop_log.txt
  path: "C:/Program Files (x86)/Steam"
  # 日志文件修改时间的轮询间隔（秒）
  poll_interval: 1.0

# 拷贝相关配置
copy:
  # 拷贝目标目录
  path: "C:/Users/you/Desktop/WallpaperExtractor"
  # true：只拷贝每个壁纸目录中的第一个视频文件
  # false：拷贝整个壁纸目录
  video_mode: true
  # 视频模式下识别的视频文件格式
  video_formats: ["mp4", "avi", "mov", "wmv", "flv", "mkv"]

# 日志配置
log:
  level: "INFO"
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(template_path, "w", encoding="utf-8") as f:
        f.write(template_content)

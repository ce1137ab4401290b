"""
@description 通用工具函数
@responsibility 提供 Steam 目录结构解析、创意工坊链接及时间格式化等辅助功能
"""

from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Optional
import re

WALLPAPER_ENGINE_APP_ID = "431960"

LOG_DIRECTORY = "logs"
LOG_FILENAME = "workshop_log.txt"
WORKSHOP_CONTENT_PATH = ("steamapps", "workshop", "content", WALLPAPER_ENGINE_APP_ID)
WORKSHOP_PAGE_URL = "https://steamcommunity.com/sharedfiles/filedetails/?id={id}"

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TIME_TEXT_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def resolve_log_file(steam_path: str) -> Path:
    """返回 {steam_path}/logs/workshop_log.txt"""
    return Path(steam_path, LOG_DIRECTORY, LOG_FILENAME)


def is_valid_steam_path(steam_path: Optional[str]) -> bool:
    """Steam 路径有效的条件：是目录且包含 logs/workshop_log.txt"""
    if not steam_path or not steam_path.strip():
        return False
    steam_dir = Path(steam_path.strip())
    return steam_dir.is_dir() and resolve_log_file(str(steam_dir)).is_file()


def resolve_workshop_dir(steam_path: str, workshop_id: str) -> Path:
    """返回创意工坊项目的源目录 {steam_path}/steamapps/workshop/content/431960/{id}"""
    return Path(steam_path, *WORKSHOP_CONTENT_PATH, workshop_id)


def workshop_page_url(workshop_id: str) -> str:
    return WORKSHOP_PAGE_URL.format(id=workshop_id)


def format_start_time(value: Optional[datetime] = None) -> str:
    """
    格式化日志过滤起始时间

    日志时间戳为定长、补零的 "yyyy-MM-dd HH:mm:ss"，因此可以直接按字符串比较

    Args:
        value: 时间，默认为当前时间

    Returns:
        "yyyy-MM-dd HH:mm:ss" 格式的字符串

    Examples:
        >>> format_start_time(datetime(2024, 1, 2, 3, 4, 5))
        '2024-01-02 03:04:05'
    """
    return (value or datetime.now()).strftime(TIME_FORMAT)


def is_valid_time_text(value: str) -> bool:
    """判断字符串是否为合法的 "yyyy-MM-dd HH:mm:ss" 时间"""
    if not value or not _TIME_TEXT_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, TIME_FORMAT)
    except ValueError:
        return False
    return True

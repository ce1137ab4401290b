"""
@description 创意工坊日志解析服务核心逻辑
@responsibility 将 workshop_log.txt 的日志行按起始时间过滤，归并为去重后的订阅记录
"""

import re
from typing import Iterable, Optional

from app.schemas.workshop import WorkshopRecord
from app.utils.helpers import WALLPAPER_ENGINE_APP_ID


APP_MARKER = f"[AppID {WALLPAPER_ENGINE_APP_ID}]"

TIME_PATTERN = re.compile(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]")

UNUSED_PATTERN = re.compile(r"Detected workshop change : removing unused item (\d+)")
UNKNOWN_PATTERN = re.compile(r"Detected workshop change : removing unknown item (\d+)")
SUBSCRIBE_PATTERN = re.compile(
    r"Detected workshop change : added subscribed item (\d+)"
)
UNSUBSCRIBE_PATTERN = re.compile(
    r"Detected workshop change : removing unsubscribed item (\d+)"
)

# 顺序即优先级：移除类日志先于订阅/取消订阅判断
REMOVAL_PATTERNS = (UNUSED_PATTERN, UNKNOWN_PATTERN)
STATUS_PATTERNS = ((SUBSCRIBE_PATTERN, True), (UNSUBSCRIBE_PATTERN, False))


def extract_log_time(line: str) -> Optional[str]:
    match = TIME_PATTERN.search(line)
    if match:
        return match.group(1)
    return None


def match_removal(line: str) -> Optional[str]:
    """匹配 "removing unused/unknown item"，返回项目 ID"""
    for pattern in REMOVAL_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return None


def match_status(line: str) -> Optional[tuple[str, bool]]:
    """匹配订阅/取消订阅日志，返回 (项目 ID, 是否订阅)"""
    for pattern, subscribed in STATUS_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(1), subscribed
    return None


def analyze_log(
    log_content: Optional[Iterable[str]], start_time: Optional[str] = None
) -> list[WorkshopRecord]:
    """
    解析日志内容，得到当前订阅状态

    同一 ID 以日志中最后出现的行为准（按行序，不按时间值）；
    "removing unused/unknown item" 会把该 ID 从结果中移除

    Args:
        log_content: 日志文件的全部行
        start_time: 起始时间（"yyyy-MM-dd HH:mm:ss"，含边界），为空表示不过滤

    Returns:
        订阅记录列表，按 ID 首次进入结果的顺序排列
    """
    if not log_content:
        return []

    records: dict[str, WorkshopRecord] = {}
    filter_by_time = bool(start_time)

    for line in log_content:
        if APP_MARKER not in line:
            continue

        log_time = extract_log_time(line)
        if log_time is None:
            continue

        # 定长补零格式，字符串比较即时间比较
        if filter_by_time and log_time < start_time:
            continue

        removed_id = match_removal(line)
        if removed_id is not None:
            records.pop(removed_id, None)
            continue

        status = match_status(line)
        if status is None:
            continue

        item_id, subscribed = status
        # 已存在的 ID 保持原有位置，只替换时间和状态
        records[item_id] = WorkshopRecord(
            id=item_id, timestamp=log_time, subscribed=subscribed
        )

    return list(records.values())

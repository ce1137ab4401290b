"""
@description 文件过滤服务核心逻辑
@responsibility 提供视频文件格式判断，以及在壁纸目录中挑选要拷贝的视频文件
"""

from pathlib import Path
from typing import Optional


def is_video_file(filename: str, formats: list[str]) -> bool:
    """
    判断文件是否为支持的视频格式

    Args:
        filename: 文件名称
        formats: 支持的视频格式列表（不含点号，如 ['mp4', 'mkv']）

    Returns:
        True 表示为支持的视频文件，False 表示不支持或非视频文件
    """
    # 提取文件扩展名（最后一个点之后的部分）
    if "." not in filename:
        return False

    extension = filename.rsplit(".", 1)[-1].lower()
    return extension in formats


def find_first_video_file(directory: Path, formats: list[str]) -> Optional[Path]:
    """
    返回目录中第一个视频文件（不递归子目录）

    按文件名排序后选择，保证同一目录每次选中同一个文件

    Args:
        directory: 壁纸源目录
        formats: 支持的视频格式列表

    Returns:
        视频文件路径，没有匹配文件时返回 None
    """
    candidates = sorted(
        (entry for entry in directory.iterdir() if entry.is_file()),
        key=lambda entry: entry.name,
    )
    for entry in candidates:
        if is_video_file(entry.name, formats):
            return entry
    return None

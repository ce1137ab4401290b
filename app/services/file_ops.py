"""
@description 本地文件操作
@responsibility 视频文件拷贝、整个目录拷贝及源目录删除（均为阻塞调用，由拷贝任务放到工作线程执行）
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from loguru import logger

from app.core.config import DEFAULT_VIDEO_FORMATS
from app.services.file_filter import find_first_video_file


def _check_source_dir(source_dir: Path) -> None:
    if not source_dir.exists() or not source_dir.is_dir():
        raise FileNotFoundError(f"目录不存在: {source_dir}")


def copy_video_file(
    source_dir: Path, target_dir: Path, formats: Optional[list[str]] = None
) -> Path:
    """
    拷贝源目录中的第一个视频文件到目标目录（覆盖同名文件）

    Returns:
        拷贝后的文件路径

    Raises:
        FileNotFoundError: 源目录不存在，或目录中没有视频文件
    """
    _check_source_dir(source_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    video_file = find_first_video_file(source_dir, formats or DEFAULT_VIDEO_FORMATS)
    if video_file is None:
        raise FileNotFoundError("未找到视频文件")

    target_file = target_dir / video_file.name
    shutil.copyfile(video_file, target_file)
    logger.debug(f"视频文件已拷贝: {video_file} -> {target_file}")
    return target_file


def copy_directory(source_dir: Path, target_dir: Path) -> Path:
    """
    拷贝整个源目录到 target_dir/<源目录名>，保留相对结构并覆盖已存在的文件

    Returns:
        拷贝后的目录路径

    Raises:
        FileNotFoundError: 源目录不存在
    """
    _check_source_dir(source_dir)

    target_path = target_dir / source_dir.name
    shutil.copytree(source_dir, target_path, symlinks=True, dirs_exist_ok=True)

    logger.debug(f"目录已拷贝: {source_dir} -> {target_path}")
    return target_path


def delete_directory(dir_path: Optional[Path]) -> bool:
    """
    递归删除目录，先删除子项再删除父目录

    单个文件删除失败只记录日志并继续。传入符号链接时只删除链接本身，不进入链接指向的目录

    Returns:
        目录（或符号链接）存在时返回 True，否则返回 False
    """
    if dir_path is None:
        return False

    if dir_path.is_symlink():
        _delete_path(dir_path)
        return True

    if not dir_path.is_dir():
        return False

    for current, dirnames, filenames in os.walk(dir_path, topdown=False):
        for filename in filenames:
            _delete_path(Path(current) / filename)
        for dirname in dirnames:
            _delete_path(Path(current) / dirname)
    _delete_path(dir_path)
    return True


def _delete_path(path: Path) -> None:
    try:
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"删除文件失败: {path} ({e})")

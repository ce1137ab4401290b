"""
@description Steam 创意工坊日志监听任务
@responsibility 定时检查 workshop_log.txt 的修改时间，变化时重新解析并在结果变化时通知回调
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from app.schemas.workshop import WorkshopRecord
from app.services.log_parser import analyze_log
from app.utils.helpers import resolve_log_file


FileChangeCallback = Callable[[Optional[list[WorkshopRecord]]], None]


class LogWatcher:
    """
    日志文件轮询监听器

    检测、启动、停止、更新起始时间共用一把锁，
    保证一次检测不会在中途看到新的过滤时间
    """

    def __init__(
        self,
        on_file_changed: FileChangeCallback,
        start_time: Optional[str] = None,
        poll_interval: float = 1.0,
    ):
        if on_file_changed is None:
            raise ValueError("文件变化回调不能为空")

        self._on_file_changed = on_file_changed
        self._start_time = start_time
        self._poll_interval = poll_interval
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

        self._steam_path: Optional[str] = None
        self._last_modified_time = 0
        self._cached_models: Optional[list[WorkshopRecord]] = None
        self._running = False
        self.last_check_time: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def steam_path(self) -> Optional[str]:
        return self._steam_path

    @property
    def start_time(self) -> Optional[str]:
        return self._start_time

    async def start_watching(self, steam_path: str) -> None:
        """开始监听，已在运行时先停止当前监听"""
        if steam_path is None or not steam_path.strip():
            raise ValueError("Steam 路径不能为空")

        async with self._lock:
            await self._stop_locked()

            self._steam_path = steam_path.strip()
            self._running = True
            self._stop_event = asyncio.Event()
            self._task = asyncio.create_task(self._watch_loop())

        logger.info(f"开始监听 Steam 日志: {resolve_log_file(self._steam_path)}")

    async def stop_watching(self) -> None:
        async with self._lock:
            if not self._running:
                return
            await self._stop_locked()
        logger.info("日志监听已停止")

    async def update_start_time(self, start_time: str) -> None:
        """更新起始时间，并清空缓存以便下一次检测按新时间重新过滤"""
        if start_time is None:
            raise ValueError("起始时间不能为空")

        async with self._lock:
            self._start_time = start_time
            self._last_modified_time = 0
            self._cached_models = None

        logger.info(f"日志过滤起始时间已更新: {start_time}")

    async def detect_file(self) -> None:
        """执行一次检测"""
        async with self._lock:
            await self._detect_locked()

    async def _detect_locked(self) -> None:
        if not self._running or self._steam_path is None:
            return

        file_path = resolve_log_file(self._steam_path)
        self.last_check_time = datetime.now()

        try:
            current_modified_time = file_path.stat().st_mtime_ns
        except OSError as e:
            logger.warning(f"获取日志文件修改时间失败: {file_path} ({e})")
            return

        if current_modified_time == self._last_modified_time:
            return

        self._last_modified_time = current_modified_time
        logger.debug(f"日志文件已修改，重新解析: {file_path}")

        content = await asyncio.to_thread(self._read_lines, file_path)
        new_models = (
            analyze_log(content, self._start_time) if content is not None else None
        )

        if new_models == self._cached_models:
            return

        self._cached_models = new_models
        logger.info(
            f"订阅数据已变化: {len(new_models) if new_models is not None else 0} 项"
        )
        try:
            self._on_file_changed(new_models)
        except Exception as e:
            logger.error(f"文件变化回调执行失败: {e}")

    @staticmethod
    def _read_lines(file_path: Path) -> Optional[list[str]]:
        """按 UTF-8 读取全部行，文件不存在或不可读时返回 None"""
        try:
            if not file_path.is_file():
                return None
            return file_path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"读取日志文件失败: {file_path} ({e})")
            return None

    async def _stop_locked(self) -> None:
        self._running = False
        self._stop_event.set()
        task = self._task
        self._task = None
        self._last_modified_time = 0
        self._cached_models = None

        if task is None or task.done() or task is asyncio.current_task():
            return

        # 持锁期间循环只可能在等待间隔或等待锁，直接取消即可
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _watch_loop(self) -> None:
        """监听主循环"""
        stop_event = self._stop_event
        while not stop_event.is_set():
            try:
                await self.detect_file()
            except Exception as e:
                logger.error(f"日志监听循环出错: {e}")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass

"""
@description 批量拷贝服务核心逻辑
@responsibility 校验拷贝条件，异步逐项拷贝壁纸文件并清理源目录，记录每一项的拷贝结果
"""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from loguru import logger

from app.core.database import get_session
from app.models.copy_record import CopyRecord
from app.schemas.workshop import CopyJobConfig, CopyMode, CopyStatus, TrackedItem
from app.services.file_ops import copy_directory, copy_video_file, delete_directory
from app.services.item_registry import ItemRegistry
from app.utils.helpers import resolve_workshop_dir

if TYPE_CHECKING:
    from app.core.config import Config


CompleteCallback = Callable[[int, int], None]


class CopyPipeline:
    """批量拷贝服务，同一时间最多运行一个拷贝任务"""

    def __init__(self, registry: ItemRegistry, config: "Config"):
        self._registry = registry
        self._config = config
        self._task: Optional[asyncio.Task] = None
        self._cancel_event = asyncio.Event()
        self.last_result: Optional[dict] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def validate_job(self, copy_path: Optional[str], mode: CopyMode) -> CopyJobConfig:
        """
        校验拷贝条件并创建目标目录

        Raises:
            ValueError: 未配置 Steam 路径、没有可拷贝的项目或未填写拷贝路径
            OSError: 目标目录创建失败
        """
        steam_path = self._config.steam.path
        if not steam_path or not steam_path.strip():
            raise ValueError("请先配置 Steam 路径")

        if self._registry.total_count == 0:
            raise ValueError("没有可拷贝的创意工坊项目")

        if copy_path is None or not copy_path.strip():
            raise ValueError("请输入拷贝路径")

        target_dir = Path(copy_path.strip())
        target_dir.mkdir(parents=True, exist_ok=True)

        return CopyJobConfig(
            mode=mode, destination_root=target_dir, steam_path=steam_path.strip()
        )

    def start_job(
        self, job_config: CopyJobConfig, on_complete: Optional[CompleteCallback] = None
    ) -> asyncio.Task:
        """
        启动拷贝任务，立即返回

        Raises:
            RuntimeError: 已有拷贝任务在运行
        """
        if self.is_running:
            raise RuntimeError("拷贝任务正在进行中")

        self._cancel_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_job(job_config, on_complete))
        logger.info(
            f"拷贝任务已启动: 模式={job_config.mode.value}, 目标={job_config.destination_root}"
        )
        return self._task

    def cancel_job(self) -> None:
        """请求取消，当前项拷贝完成后生效"""
        if self.is_running:
            self._cancel_event.set()
            logger.info("已请求取消拷贝任务")

    async def _run_job(
        self, job_config: CopyJobConfig, on_complete: Optional[CompleteCallback]
    ) -> dict:
        result = {"success_count": 0, "failed_count": 0, "cancelled": False}

        try:
            # 任务开始后新加入的项目不参与本次拷贝
            items = self._registry.items()
            for item in items:
                if self._cancel_event.is_set():
                    result["cancelled"] = True
                    logger.info("拷贝任务已取消")
                    break

                if item.copy_status == CopyStatus.SUCCESS:
                    continue

                if await self._process_item(item, job_config):
                    result["success_count"] += 1
                else:
                    result["failed_count"] += 1
        except Exception as e:
            logger.exception(f"拷贝任务异常终止: {e}")
            result = {
                "success_count": 0,
                "failed_count": self._registry.total_count,
                "cancelled": False,
            }

        logger.info(
            f"拷贝任务结束: 成功 {result['success_count']}, 失败 {result['failed_count']}"
        )
        self.last_result = result

        if on_complete is not None:
            try:
                on_complete(result["success_count"], result["failed_count"])
            except Exception as e:
                logger.error(f"拷贝完成回调执行失败: {e}")

        return result

    async def _process_item(self, item: TrackedItem, job_config: CopyJobConfig) -> bool:
        """拷贝单个项目，失败只影响该项目本身"""
        source_dir = resolve_workshop_dir(job_config.steam_path, item.id)
        self._registry.set_item_status(item.id, CopyStatus.COPYING)

        try:
            target_path = await asyncio.to_thread(
                self._copy_item, source_dir, job_config
            )
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"项目 {item.id} 拷贝失败: {message}")
            self._registry.set_item_status(item.id, CopyStatus.FAILED, message)
            await self.save_copy_record(
                {
                    "workshop_id": item.id,
                    "source_path": str(source_dir),
                    "target_path": str(job_config.destination_root),
                    "copy_mode": job_config.mode.value,
                    "status": "failed",
                    "error_message": message,
                }
            )
            return False

        self._registry.set_item_status(item.id, CopyStatus.SUCCESS)
        logger.info(f"项目 {item.id} 拷贝成功: {target_path}")
        await self.save_copy_record(
            {
                "workshop_id": item.id,
                "source_path": str(source_dir),
                "target_path": str(target_path),
                "copy_mode": job_config.mode.value,
                "status": "success",
                "error_message": None,
            }
        )
        return True

    def _copy_item(self, source_dir: Path, job_config: CopyJobConfig) -> Path:
        if job_config.mode == CopyMode.VIDEO_FILE:
            target_path = copy_video_file(
                source_dir,
                job_config.destination_root,
                self._config.copy_settings.video_formats,
            )
        else:
            target_path = copy_directory(source_dir, job_config.destination_root)

        # 拷贝已成功，源目录删除失败不影响结果
        if not delete_directory(source_dir):
            logger.warning(f"源目录删除失败: {source_dir}")
        return target_path

    async def save_copy_record(self, record: dict) -> None:
        """
        保存拷贝记录到数据库

        Args:
            record: 拷贝记录字典
        """
        try:
            async with get_session() as session:
                copy_record = CopyRecord(
                    workshop_id=record["workshop_id"],
                    source_path=record["source_path"],
                    target_path=record["target_path"],
                    copy_mode=record["copy_mode"],
                    status=record["status"],
                    error_message=record.get("error_message"),
                )
                session.add(copy_record)
                await session.commit()
                logger.debug(f"拷贝记录已保存: {record['workshop_id']}")
        except Exception as e:
            logger.error(f"保存拷贝记录失败: {e}")

"""
@description 创意工坊项目注册表
@responsibility 将日志解析快照合并到当前跟踪的项目集合，并维护每个项目的拷贝状态
"""

import threading
from typing import Callable, Iterable, Optional

from loguru import logger

from app.schemas.workshop import CopyStatus, TrackedItem, WorkshopRecord


class ItemRegistry:
    """
    当前跟踪的创意工坊项目集合

    以 ID 为键保存不可变的 TrackedItem，任何更新都替换整个槽位，
    因此读取方拿到的总是完整的一份状态
    """

    def __init__(self, on_data_changed: Optional[Callable[[int], None]] = None):
        self._items: dict[str, TrackedItem] = {}
        self._lock = threading.Lock()
        self._on_data_changed = on_data_changed

    def set_on_data_changed(self, callback: Optional[Callable[[int], None]]) -> None:
        self._on_data_changed = callback

    def reconcile(self, snapshot: Optional[Iterable[WorkshopRecord]]) -> int:
        """
        合并一次解析快照

        已存在的项目更新时间和订阅状态（保留拷贝状态），新项目以未拷贝状态加入，
        快照中不存在的项目被移除；快照为空时清空全部项目

        Returns:
            合并后的项目总数
        """
        records = list(snapshot or [])

        with self._lock:
            if not records:
                removed = len(self._items)
                self._items.clear()
                added = updated = 0
            else:
                added = updated = 0
                current_ids = set()
                for record in records:
                    current_ids.add(record.id)
                    existing = self._items.get(record.id)
                    if existing is None:
                        self._items[record.id] = TrackedItem(record=record)
                        added += 1
                    elif existing.record != record:
                        self._items[record.id] = existing.model_copy(
                            update={"record": record, "version": existing.version + 1}
                        )
                        updated += 1

                obsolete = [item_id for item_id in self._items if item_id not in current_ids]
                for item_id in obsolete:
                    del self._items[item_id]
                removed = len(obsolete)

            total = len(self._items)

        logger.info(
            f"项目列表已更新: 共 {total} 项（新增 {added}, 更新 {updated}, 移除 {removed}）"
        )
        self._notify(total)
        return total

    def reset_non_success_statuses(self) -> None:
        """将所有非成功状态的项目重置为未拷贝，准备重新拷贝"""
        with self._lock:
            for item_id, item in self._items.items():
                if item.copy_status != CopyStatus.SUCCESS:
                    self._items[item_id] = self._with_status(item, CopyStatus.NOT_COPIED, "")

    def compute_actual_copy_count(self) -> int:
        """计算仍需拷贝的项目数量（非成功状态）"""
        with self._lock:
            return sum(
                1 for item in self._items.values() if item.copy_status != CopyStatus.SUCCESS
            )

    def set_item_status(
        self, item_id: str, status: CopyStatus, message: str = ""
    ) -> Optional[TrackedItem]:
        """
        更新单个项目的拷贝状态

        Returns:
            更新后的项目；项目已不在注册表中时返回 None
        """
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                logger.debug(f"项目 {item_id} 已不在列表中，忽略状态更新: {status.value}")
                return None
            updated = self._with_status(item, status, message)
            self._items[item_id] = updated
            return updated

    def get_item(self, item_id: str) -> Optional[TrackedItem]:
        with self._lock:
            return self._items.get(item_id)

    def items(self) -> list[TrackedItem]:
        """按加入顺序返回当前项目列表的副本"""
        with self._lock:
            return list(self._items.values())

    @property
    def total_count(self) -> int:
        with self._lock:
            return len(self._items)

    def _notify(self, total: int) -> None:
        if self._on_data_changed is None:
            return
        try:
            self._on_data_changed(total)
        except Exception as e:
            logger.error(f"数据变化回调执行失败: {e}")

    @staticmethod
    def _with_status(item: TrackedItem, status: CopyStatus, message: str) -> TrackedItem:
        return item.model_copy(
            update={
                "copy_status": status,
                "copy_status_message": message or "",
                "version": item.version + 1,
            }
        )

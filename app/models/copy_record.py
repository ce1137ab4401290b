"""
@description 拷贝记录数据模型
@responsibility 记录每个创意工坊项目拷贝操作的结果
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text

from app.core.database import Base


class CopyRecord(Base):
    __tablename__ = "copy_record"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workshop_id = Column(String(32), index=True)
    source_path = Column(String(1024))
    target_path = Column(String(1024))
    # video / directory
    copy_mode = Column(String(32))
    # success / failed
    status = Column(String(50))
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

# testgen/models.py
from sqlalchemy import Column, Integer, String, DateTime, Text
import datetime

from testgen.db import Base

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


def utcnow() -> datetime.datetime:
    # naive UTC, SQLite DateTime columns drop tzinfo anyway
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class GenerationRecord(Base):
    __tablename__ = "generations"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    generation_id = Column(String(36), unique=True, index=True, nullable=False)
    owner_id = Column(String(128), index=True, nullable=False)
    input_code = Column(Text, nullable=False)
    language = Column(String(64), nullable=False)
    status = Column(String(16), nullable=False, default=STATUS_PENDING)
    generated_tests = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

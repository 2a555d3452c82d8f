# testgen/db.py
import datetime
import os
import uuid
from contextlib import contextmanager
from typing import Optional, Dict, Any, List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.exc import SQLAlchemyError

from testgen import monitoring
from testgen.errors import NotFoundError, StatusTransitionError

# Default dev DB; api/index.py points DATABASE_URL at /tmp before import
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./testgen.db")


def _make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = _make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def reconfigure(url: str):
    """Reconfigure the DB engine and session factory at runtime (for tests)."""
    global engine, SessionLocal
    engine.dispose()
    engine = _make_engine(url)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    # import models lazily so Base metadata has them
    import testgen.models as models  # noqa: F401
    Base.metadata.create_all(bind=engine)


@contextmanager
def _session():
    db: Session = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        monitoring.logger.exception("DB error")
        raise
    finally:
        db.close()


def _iso_utc(value: Optional[datetime.datetime]) -> Optional[str]:
    # stored naive UTC; always emit the offset and a fixed-width fraction
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.isoformat(timespec="microseconds")


def record_to_dict(rec) -> Dict[str, Any]:
    return {
        "id": rec.generation_id,
        "owner_id": rec.owner_id,
        "input_code": rec.input_code,
        "language": rec.language,
        "status": rec.status,
        "generated_tests": rec.generated_tests,
        "created_at": _iso_utc(rec.created_at),
        "updated_at": _iso_utc(rec.updated_at),
    }


def create_generation(owner_id: str, input_code: str, language: str) -> Dict[str, Any]:
    """Insert a new pending record. Returns the stored record as a dict."""
    from testgen.models import GenerationRecord, STATUS_PENDING, utcnow

    now = utcnow()
    with _session() as db:
        rec = GenerationRecord(
            generation_id=str(uuid.uuid4()),
            owner_id=owner_id,
            input_code=input_code,
            language=language,
            status=STATUS_PENDING,
            generated_tests=None,
            created_at=now,
            updated_at=now,
        )
        db.add(rec)
        db.commit()
        db.refresh(rec)
        return record_to_dict(rec)


def _transition(generation_id: str, status: str, generated_tests: Optional[str]) -> Dict[str, Any]:
    """
    Move a pending record to a terminal status. The UPDATE is conditional on
    status == pending, so a record can only ever leave pending once.
    input_code and language are never part of the update.
    """
    from testgen.models import GenerationRecord, STATUS_PENDING, utcnow

    with _session() as db:
        updated = (
            db.query(GenerationRecord)
            .filter(
                GenerationRecord.generation_id == generation_id,
                GenerationRecord.status == STATUS_PENDING,
            )
            .update(
                {"status": status, "generated_tests": generated_tests, "updated_at": utcnow()},
                synchronize_session=False,
            )
        )
        db.commit()
        rec = db.query(GenerationRecord).filter(GenerationRecord.generation_id == generation_id).first()
        if rec is None:
            raise NotFoundError("Generation not found")
        if updated == 0:
            raise StatusTransitionError(
                f"Generation {generation_id} is already {rec.status}; cannot move it to {status}"
            )
        return record_to_dict(rec)


def complete_generation(generation_id: str, generated_tests: str) -> Dict[str, Any]:
    from testgen.models import STATUS_COMPLETED
    if not generated_tests:
        raise ValueError("a completed generation needs non-empty generated_tests")
    return _transition(generation_id, STATUS_COMPLETED, generated_tests)


def fail_generation(generation_id: str) -> Dict[str, Any]:
    from testgen.models import STATUS_FAILED
    return _transition(generation_id, STATUS_FAILED, None)


def get_generation(generation_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
    """
    Return the record only when it belongs to owner_id, else None.
    Missing and foreign records look the same to the caller.
    """
    from testgen.models import GenerationRecord

    with _session() as db:
        rec = (
            db.query(GenerationRecord)
            .filter(
                GenerationRecord.generation_id == generation_id,
                GenerationRecord.owner_id == owner_id,
            )
            .first()
        )
        return record_to_dict(rec) if rec else None


def list_generations_for_owner(owner_id: str) -> List[Dict[str, Any]]:
    """All records of one owner, newest first."""
    from testgen.models import GenerationRecord

    with _session() as db:
        rows = (
            db.query(GenerationRecord)
            .filter(GenerationRecord.owner_id == owner_id)
            .order_by(GenerationRecord.created_at.desc(), GenerationRecord.pk.desc())
            .all()
        )
        return [record_to_dict(r) for r in rows]


def count_generations(owner_id: Optional[str] = None) -> int:
    from testgen.models import GenerationRecord

    with _session() as db:
        q = db.query(GenerationRecord)
        if owner_id is not None:
            q = q.filter(GenerationRecord.owner_id == owner_id)
        return q.count()

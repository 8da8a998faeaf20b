# synapse/storage/db.py
from sqlmodel import SQLModel, create_engine, Session

from core.settings import DB_PATH

# Ensure SQLModel metadata is populated
import models.task_calendar_event  # noqa: F401


_engine = create_engine(f"sqlite:///{DB_PATH.as_posix()}", echo=False)
_tables_ready = False


def init_db(engine=None):
    global _tables_ready
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine or _engine)
    if engine is None or engine is _engine:
        _tables_ready = True


def get_engine():
    return _engine


def get_session() -> Session:
    # tables are created on first use; there is no startup hook to do it
    if not _tables_ready:
        init_db()
    return Session(_engine)

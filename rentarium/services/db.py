"""Schema creation and the single-writer transaction guard.

All ledger writes follow read -> validate -> write. write_transaction holds a
process-wide lock for that whole cycle and commits only at the outermost
level, so a failure anywhere leaves the database untouched.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from rentarium.models import Base

logger = logging.getLogger(__name__)

_WRITE_LOCK = threading.RLock()
_DEPTH_KEY = "rentarium_write_depth"


def create_schema(engine: Engine) -> None:
    """Create all ledger tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("Schema ensured on %s", engine.url)


@contextmanager
def write_transaction(session: Session) -> Iterator[Session]:
    """Run a read-modify-write cycle as one atomic unit.

    Nested blocks on the same session join the outer block: only the
    outermost one commits, and any exception rolls everything back.

    Example:
        ```python
        with write_transaction(db):
            status = ledger.rent_status(tenant_id, "2024-03")
            status.paid_amount += amount
        ```
    """
    with _WRITE_LOCK:
        depth = session.info.get(_DEPTH_KEY, 0)
        session.info[_DEPTH_KEY] = depth + 1
        try:
            yield session
            if depth == 0:
                session.commit()
        except Exception:
            if depth == 0:
                session.rollback()
            raise
        finally:
            session.info[_DEPTH_KEY] = depth


__all__ = ["create_schema", "write_transaction"]

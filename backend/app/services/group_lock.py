"""Per-group serialization for membership and provisioning.

Two layers: a process-local lock chosen by hashing the group id onto a
fixed set of stripes (sync endpoints run in a thread pool) and a ``SELECT ... FOR UPDATE`` on the group row so that
workers in separate processes serialize on PostgreSQL. SQLite ignores the
row lock; the process lock still covers it.

The caller must commit or roll back before the ``with`` block exits.
"""
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from app.models.group import Group

logger = logging.getLogger(__name__)

LOCK_STRIPES = 64

# Groups sharing a stripe serialize with each other; callers never hold two.
_group_locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _lock_for(group_id: str) -> threading.Lock:
    return _group_locks[hash(group_id) % LOCK_STRIPES]


@contextmanager
def group_lock(db: Session, group_id: str) -> Iterator[None]:
    lock = _lock_for(group_id)
    with lock:
        db.query(Group.group_id).filter(Group.group_id == group_id).with_for_update().first()
        logger.debug("Acquired lock for group %s", group_id)
        yield

# Overview: Transaction scoping and locking helpers shared by the services.

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db


class StorageError(Exception):
    """Wraps any underlying database failure; the driver message passes through."""

    @classmethod
    def from_exc(cls, exc: SQLAlchemyError) -> "StorageError":
        orig = getattr(exc, "orig", None)
        return cls(str(orig) if orig is not None else str(exc))


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def storage_errors():
    """
    Roll back and re-raise SQLAlchemy failures as StorageError.

    Used around single-statement work. No retry is attempted.
    """
    try:
        yield db.session
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError.from_exc(exc) from exc


@contextmanager
def atomic():
    """
    One begin/commit/rollback scope.

    Commits when the block exits cleanly. Any exception, domain or storage,
    rolls the whole unit back so none of its statements survive.
    """
    try:
        with storage_errors():
            yield db.session
            db.session.commit()
    except Exception:
        db.session.rollback()
        raise

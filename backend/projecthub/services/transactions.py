"""
Transactional helpers for multi-row writes.

Two modes are supported:

* ``atomic`` / ``run_cascade``: several writes that commit together or not at all.
* ``update_with_optimistic_lock``: re-fetch, mutate, commit with a version check,
  retried through ``retry_operation`` when another writer got there first.

Retry behaviour is described by a ``RetryPolicy`` so callers and tests can
inject their own limits, backoff and classifier.
"""

from __future__ import annotations

import random
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Sequence, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from projecthub.core.exceptions import NotFound
from projecthub.core.logging import get_logger
from projecthub.core.settings import settings

logger = get_logger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATE codes for serialization failure and deadlock
_WRITE_CONFLICT_SQLSTATES = {"40001", "40P01"}
_UNIQUE_VIOLATION_SQLSTATE = "23505"


class TransientTransactionError(Exception):
    """Raised by callers to signal a transaction failure that is safe to retry."""


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_duplicate_key_error(exc: BaseException) -> bool:
    if not isinstance(exc, IntegrityError):
        return False
    if _sqlstate(exc) == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    text = str(getattr(exc, "orig", exc)).lower()
    return "unique" in text or "duplicate" in text


def is_write_conflict_error(exc: BaseException) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    if _sqlstate(exc) in _WRITE_CONFLICT_SQLSTATES:
        return True
    text = str(getattr(exc, "orig", exc)).lower()
    return "database is locked" in text or "could not serialize" in text or "deadlock" in text


def is_retryable_error(exc: BaseException) -> bool:
    """Classify storage errors: version conflicts, duplicate keys, write conflicts and transient failures retry."""
    if isinstance(exc, (StaleDataError, TransientTransactionError)):
        return True
    if is_duplicate_key_error(exc) or is_write_conflict_error(exc):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return False


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay: float = 0.1
    max_delay: float = 2.0
    jitter: float = 0.1
    is_retryable: Callable[[BaseException], bool] = field(default=is_retryable_error)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay_ms / 1000,
            max_delay=settings.retry_max_delay_ms / 1000,
            jitter=settings.retry_jitter_ms / 1000,
        )

    def delays(self) -> Iterator[float]:
        """Backoff before each retry: doubles from ``initial_delay`` with jitter, capped at ``max_delay``."""
        delay = min(self.initial_delay, self.max_delay)
        for _ in range(self.max_retries):
            yield delay
            delay = min(delay * 2 + random.uniform(0, self.jitter), self.max_delay)


def retry_operation(
    operation: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    *,
    db: Optional[Session] = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """
    Run ``operation`` and retry it on errors the policy classifies as retryable.

    When ``db`` is given the session is rolled back before each retry so the
    next attempt reads fresh rows. Errors that are not retryable, and the last
    error once retries are exhausted, propagate unchanged.
    """
    policy = policy or RetryPolicy.from_settings()
    delays = policy.delays()
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except Exception as exc:
            if db is not None:
                db.rollback()
            if not policy.is_retryable(exc):
                raise
            delay = next(delays, None)
            if delay is None:
                logger.warning("retries_exhausted", attempts=attempt, error_type=type(exc).__name__)
                raise
            logger.info(
                "retrying_operation",
                attempt=attempt,
                delay_ms=round(delay * 1000, 1),
                error_type=type(exc).__name__,
            )
            sleep(delay)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Commit everything written inside the block, or roll all of it back.

    The session itself is left open in both cases: its lifetime belongs to
    the caller (``get_db`` closes it at the end of the request), so the
    same session can be reused after a rollback, e.g. by a retry.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def update_with_optimistic_lock(
    db: Session,
    fetch: Callable[[], Optional[T]],
    mutate: Callable[[T], Any],
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """
    Re-fetch the row, apply ``mutate`` and commit with the version check.

    ``mutate`` may run more than once and must give the same result when
    reapplied to a freshly fetched row.
    """

    def _attempt() -> T:
        instance = fetch()
        if instance is None:
            raise NotFound("Document not found")
        mutate(instance)
        db.commit()
        db.refresh(instance)
        return instance

    return retry_operation(_attempt, policy, db=db, sleep=sleep)


@dataclass(frozen=True)
class CascadeStep:
    """One ``DELETE FROM model WHERE criteria(key)`` in a cascade."""

    name: str
    model: Any
    criteria: Callable[[Any], Any]


def run_cascade(db: Session, steps: Sequence[CascadeStep], key: Any) -> dict[str, int]:
    """Execute the steps in order inside one transaction and return deleted row counts per step."""
    deleted: dict[str, int] = {}
    with atomic(db):
        for step in steps:
            count = (
                db.query(step.model)
                .filter(step.criteria(key))
                .delete(synchronize_session=False)
            )
            deleted[step.name] = count
            logger.debug("cascade_step_applied", step=step.name, deleted=count)
    return deleted

# Overview: Write-through persistence helpers; retries transient database failures and reports the rest.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class PersistenceError(RuntimeError):
    """Raised when a durable write still fails after all retry attempts."""
    pass


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a mutate-and-commit operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). func must redo its whole unit of work,
    since the session is rolled back between attempts. Domain errors raised
    by func roll back the session and propagate immediately.

    Raises:
        PersistenceError: the last attempt failed; the session is rolled back
    """
    if attempts is None:
        attempts = current_app.config.get("COMMIT_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("COMMIT_RETRY_BACKOFF", 0.1)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                current_app.logger.error(
                    "Durable write failed after %d attempts: %s", attempts, exc
                )
                raise PersistenceError("Could not save changes, please retry") from exc
            current_app.logger.warning(
                "Durable write attempt %d/%d failed, retrying: %s", attempt + 1, attempts, exc
            )
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            # Discard partial changes so the next command starts clean
            db.session.rollback()
            raise

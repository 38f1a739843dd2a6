"""
Write-through persistence tests.

Verifies:
- Transient failures are retried
- A write that cannot be made durable raises PersistenceError and leaves
  no partial state behind
"""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from shiftbook.extensions import db
from shiftbook.services import shift_service
from shiftbook.services.concurrency import PersistenceError, run_with_retry


def _locked():
    return OperationalError("COMMIT", {}, Exception("database is locked"))


class TestRunWithRetry:

    def test_retries_then_succeeds(self, app):
        attempts = []

        def op():
            attempts.append(1)
            if len(attempts) < 3:
                raise _locked()
            return "saved"

        assert run_with_retry(op, attempts=3, backoff_base=0) == "saved"
        assert len(attempts) == 3

    def test_gives_up_after_last_attempt(self, app):
        attempts = []

        def op():
            attempts.append(1)
            raise StaleDataError("version mismatch")

        with pytest.raises(PersistenceError):
            run_with_retry(op, attempts=2, backoff_base=0)
        assert len(attempts) == 2

    def test_domain_errors_are_not_retried(self, app):
        attempts = []

        def op():
            attempts.append(1)
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            run_with_retry(op, attempts=3, backoff_base=0)
        assert len(attempts) == 1


class TestDurableWrites:

    def test_failed_commit_is_reported(self, open_shift, events, monkeypatch):
        def fail(self):
            raise _locked()

        monkeypatch.setattr(type(db.session()), "commit", fail)

        with pytest.raises(PersistenceError):
            shift_service.add_production("1", 10)

        monkeypatch.undo()
        assert shift_service.get_current_shift().production == []
        assert events == []

    def test_transient_failure_recovers(self, open_shift, monkeypatch):
        session_cls = type(db.session())
        real_commit = session_cls.commit
        failures = []

        def flaky(self):
            if not failures:
                failures.append(1)
                raise _locked()
            return real_commit(self)

        monkeypatch.setattr(session_cls, "commit", flaky)

        entry = shift_service.add_production("1", 10)

        monkeypatch.undo()
        assert [e.id for e in shift_service.get_current_shift().production] == [entry.id]

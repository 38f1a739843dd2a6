# backend/shiftbook/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shiftbook.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shiftbook.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Write-through persistence: attempts and base backoff (seconds) per commit
    COMMIT_RETRY_ATTEMPTS = int(os.environ.get("COMMIT_RETRY_ATTEMPTS", "3"))
    COMMIT_RETRY_BACKOFF = float(os.environ.get("COMMIT_RETRY_BACKOFF", "0.1"))

    # Default page size for the shift report archive
    REPORT_HISTORY_LIMIT = int(os.environ.get("REPORT_HISTORY_LIMIT", "20"))

    # Printed at the top of exported reports
    BUSINESS_NAME = os.environ.get("BUSINESS_NAME", "Nik's Bakery")

    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "24"))

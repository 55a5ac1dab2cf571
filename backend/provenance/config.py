# backend/provenance/config.py
from __future__ import annotations
import os


class Config:
    # SQLite DB stored next to the backend by default
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///provenance.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound for batch registration and batch event append
    LEDGER_MAX_BATCH_SIZE = int(os.environ.get("LEDGER_MAX_BATCH_SIZE", "50"))

    # HTTP paging defaults (the core paginates exactly what it is asked for)
    LEDGER_DEFAULT_PAGE_SIZE = int(os.environ.get("LEDGER_DEFAULT_PAGE_SIZE", "20"))
    LEDGER_MAX_PAGE_SIZE = int(os.environ.get("LEDGER_MAX_PAGE_SIZE", "100"))

    # Commit retries on transient lock errors
    LEDGER_COMMIT_ATTEMPTS = int(os.environ.get("LEDGER_COMMIT_ATTEMPTS", "3"))

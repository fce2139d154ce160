"""
Environment-driven settings for the instant-transfer service.

Values come from the process environment, optionally seeded from a .env file.
"""

from dotenv import load_dotenv, find_dotenv
load_dotenv(find_dotenv(), override=False)

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./instant_transfer.db")
SQL_ECHO = _env_bool("SQL_ECHO", False)

# This institution; transfers to a bank missing from the partner registry stay on its ledger
HOME_BANK_NAME = os.getenv("HOME_BANK_NAME", "WemaTrust")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₦")

SETTLEMENT_DELAY_SECONDS = float(os.getenv("SETTLEMENT_DELAY_SECONDS", "3"))
SETTLEMENT_POLL_SECONDS = float(os.getenv("SETTLEMENT_POLL_SECONDS", "1"))
SETTLEMENT_WORKER_ENABLED = _env_bool("SETTLEMENT_WORKER_ENABLED", True)

SIMPLE_ADMIN_TOKEN = os.getenv("SIMPLE_ADMIN_TOKEN", "letmein")

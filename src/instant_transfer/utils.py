"""
Identifier, reference and clock helpers shared by the API and the settlement worker.
"""

from datetime import datetime, timezone
from uuid import uuid4


def utcnow() -> datetime:
    # Naive UTC, matching the TIMESTAMP columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid4())


def new_transfer_ref() -> str:
    return f"WT_{uuid4().hex.upper()}"


def new_settlement_ref() -> str:
    return f"STL_{uuid4().hex.upper()}"

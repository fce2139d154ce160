from datetime import timedelta

import anyio
import pytest

from instant_transfer import config
from instant_transfer.settlement import SettlementWorker, settle_due_transfers
from instant_transfer.utils import utcnow
from tests.conftest import BOB_ACCOUNT

pytestmark = pytest.mark.anyio


async def make_transfer(client, **overrides):
    body = {"fromUserId": "alice", "toAccountNumber": BOB_ACCOUNT, "amount": 2000, "fromBank": "WemaTrust"}
    body.update(overrides)
    resp = await client.post("/api/transfer", json=body)
    assert resp.status_code == 200
    return resp.json()["transferLog"]["id"]


async def get_log(client, log_id):
    resp = await client.get(f"/api/transfer-logs/{log_id}")
    assert resp.status_code == 200
    return resp.json()


async def test_pending_transfer_settles_once_due(client, session_factory, seeded):
    log_id = await make_transfer(client)

    async with session_factory() as db:
        settled = await settle_due_transfers(db, now=utcnow() + timedelta(seconds=10))

    assert settled == 1
    log = await get_log(client, log_id)
    assert log["backend_status"] == "SETTLED"
    assert log["settlement_ref"].startswith("STL_")
    assert log["settled_at"] is not None
    assert log["instant_status"] == "CREDITED"


async def test_transfer_not_settled_before_delay(client, session_factory, seeded):
    log_id = await make_transfer(client)

    async with session_factory() as db:
        settled = await settle_due_transfers(db, now=utcnow())

    assert settled == 0
    assert (await get_log(client, log_id))["backend_status"] == "PENDING"


async def test_settled_transfer_is_not_settled_again(client, session_factory, seeded):
    log_id = await make_transfer(client)
    later = utcnow() + timedelta(seconds=10)

    async with session_factory() as db:
        assert await settle_due_transfers(db, now=later) == 1
    first_ref = (await get_log(client, log_id))["settlement_ref"]
    async with session_factory() as db:
        assert await settle_due_transfers(db, now=later) == 0

    assert (await get_log(client, log_id))["settlement_ref"] == first_ref


async def test_problematic_bank_never_settles(client, session_factory, seeded):
    down_id = await make_transfer(client, amount=1500, fromBank="First Bank")
    slow_id = await make_transfer(client, amount=50, fromBank="Zenith Bank")

    async with session_factory() as db:
        settled = await settle_due_transfers(db, now=utcnow() + timedelta(days=1))

    assert settled == 0
    assert (await get_log(client, down_id))["backend_status"] == "UNRESOLVED"
    assert (await get_log(client, slow_id))["backend_status"] == "UNRESOLVED"


async def test_only_due_transfers_are_settled(client, session_factory, seeded):
    up_id = await make_transfer(client, amount=100, fromBank="Access Bank")
    down_id = await make_transfer(client, amount=100, fromBank="First Bank")

    async with session_factory() as db:
        settled = await settle_due_transfers(db, now=utcnow() + timedelta(seconds=10))

    assert settled == 1
    assert (await get_log(client, up_id))["backend_status"] == "SETTLED"
    assert (await get_log(client, down_id))["backend_status"] == "UNRESOLVED"


async def test_worker_settles_due_transfers_in_background(client, session_factory, seeded, monkeypatch):
    monkeypatch.setattr(config, "SETTLEMENT_DELAY_SECONDS", 0)
    log_id = await make_transfer(client)

    worker = SettlementWorker(session_factory, poll_seconds=0.01)
    worker.start()
    assert worker.running
    await anyio.sleep(0.3)
    await worker.stop()

    assert not worker.running
    assert (await get_log(client, log_id))["backend_status"] == "SETTLED"


async def test_fresh_worker_picks_up_pending_settlements(client, session_factory, seeded, monkeypatch):
    # Due times live on the transfer log, so a worker started later still finds them
    monkeypatch.setattr(config, "SETTLEMENT_DELAY_SECONDS", 0)
    log_id = await make_transfer(client)

    worker = SettlementWorker(session_factory, poll_seconds=60)
    assert await worker.run_once() == 1
    assert await worker.run_once() == 0
    assert (await get_log(client, log_id))["backend_status"] == "SETTLED"

"""Tests for TrustLedger."""

import pytest
import tempfile
from pathlib import Path

from humangate.errors import StoreUnavailable
from humangate.gate.ledger import SubmissionStatus, TrustLedger
from humangate.gate.models import Identity


@pytest.fixture
def temp_dir():
    """Create a temporary state directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
async def ledger(temp_dir):
    """Create an initialized TrustLedger."""
    ledger = TrustLedger(temp_dir / "state" / "ledger.db")
    await ledger.initialize()
    yield ledger
    await ledger.close()


@pytest.mark.asyncio
async def test_ledger_initialization(temp_dir):
    """Test that the ledger creates its database on init."""
    db_path = temp_dir / "state" / "ledger.db"
    ledger = TrustLedger(db_path)
    await ledger.initialize()

    assert db_path.exists()

    await ledger.close()


@pytest.mark.asyncio
async def test_lookup_empty_ledger(ledger):
    alice = Identity(name="Alice", contact="a@x.com", url="")

    assert await ledger.lookup(alice) is False


@pytest.mark.asyncio
async def test_lookup_approved_identity(ledger):
    alice = Identity(name="Alice", contact="a@x.com", url="")
    await ledger.record(alice)

    assert await ledger.lookup(alice) is True
    assert await ledger.exists(alice) is True


@pytest.mark.asyncio
async def test_lookup_requires_exact_tuple(ledger):
    """Name, contact and url must all match."""
    await ledger.record(Identity(name="Alice", contact="a@x.com", url="https://a.example"))

    assert await ledger.lookup(Identity("Alice", "a@x.com", "https://a.example")) is True
    assert await ledger.lookup(Identity("Alice", "a@x.com", "")) is False
    assert await ledger.lookup(Identity("alice", "a@x.com", "https://a.example")) is False
    assert await ledger.lookup(Identity("Alice", "b@x.com", "https://a.example")) is False


@pytest.mark.asyncio
async def test_none_url_matches_empty(ledger):
    await ledger.record(Identity(name="Bob", contact="b@x.com", url=None))

    assert await ledger.lookup(Identity(name="Bob", contact="b@x.com")) is True


@pytest.mark.asyncio
async def test_only_approved_status_counts(ledger):
    carol = Identity(name="Carol", contact="c@x.com")
    await ledger.record(carol, SubmissionStatus.PENDING)
    await ledger.record(carol, SubmissionStatus.SPAM)

    assert await ledger.lookup(carol) is False

    await ledger.record(carol, SubmissionStatus.APPROVED)

    assert await ledger.lookup(carol) is True


@pytest.mark.asyncio
async def test_lookup_without_schema_raises_store_unavailable(temp_dir):
    ledger = TrustLedger(temp_dir / "never-initialized.db")

    with pytest.raises(StoreUnavailable):
        await ledger.lookup(Identity(name="Alice", contact="a@x.com"))

    await ledger.close()


@pytest.mark.asyncio
async def test_unopenable_database_raises_store_unavailable(temp_dir):
    """A directory in place of the database file cannot be opened."""
    ledger = TrustLedger(temp_dir)

    with pytest.raises(StoreUnavailable):
        await ledger.lookup(Identity(name="Alice", contact="a@x.com"))

    await ledger.close()

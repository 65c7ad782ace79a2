import pytest

from membership.domain.models.account import UserAccount
from membership.infrastructure.documents import (
    InMemoryDocumentSession,
    InMemoryDocumentStore,
)
from membership.infrastructure.documents.memory_session import matches

pytestmark = pytest.mark.anyio


def _account(username, **fields):
    return UserAccount(username=username, **fields)


async def test_store_assigns_id_and_defers_write(session, document_store):
    account = _account("jonas")

    session.store(account)

    assert account.id is not None
    assert session.has_pending_changes
    assert document_store.count(UserAccount.collection_name) == 0

    await session.save_changes()

    assert not session.has_pending_changes
    assert document_store.count(UserAccount.collection_name) == 1


async def test_load_sees_pending_store_and_hides_pending_delete(session):
    account = _account("jonas")
    session.store(account)

    assert await session.load(UserAccount, account.id) is account

    await session.save_changes()
    session.delete(account)

    assert await session.load(UserAccount, account.id) is None


async def test_load_reads_committed_document_from_another_session(
    session, document_store: InMemoryDocumentStore
):
    account = _account("jonas", email="jonas@example.com")
    session.store(account)
    await session.save_changes()

    other = InMemoryDocumentSession(document_store)
    loaded = await other.load(UserAccount, account.id)

    assert loaded is not account
    assert loaded.email == "jonas@example.com"


async def test_evict_discards_pending_delete(session):
    account = _account("jonas")
    session.store(account)
    await session.save_changes()

    session.delete(account)
    session.evict(account)
    await session.save_changes()

    assert await session.load(UserAccount, account.id) is not None


async def test_delete_requires_id(session):
    with pytest.raises(ValueError):
        session.delete(_account("ghost"))


async def test_query_sorts_skips_and_limits(session):
    for name in ["carl", "anna", "bert", "dora"]:
        session.store(_account(name))
    await session.save_changes()

    page = await session.query(
        UserAccount, {}, sort=[("username", 1)], skip=1, limit=2
    )
    descending = await session.query(UserAccount, {}, sort=[("username", -1)])

    assert [a.username for a in page] == ["bert", "carl"]
    assert [a.username for a in descending] == ["dora", "carl", "bert", "anna"]


async def test_count_and_first_or_default(session):
    session.store(_account("anna", is_online=True))
    session.store(_account("bert"))
    await session.save_changes()

    assert await session.count(UserAccount, {"is_online": True}) == 1
    assert (await session.first_or_default(UserAccount, {"username": "bert"})).username == "bert"
    assert await session.first_or_default(UserAccount, {"username": "zed"}) is None


def test_matches_supports_operators():
    document = {"username": "Jonas", "email": None, "is_approved": False}

    assert matches(document, {"username": "Jonas"})
    assert matches(document, {"username": {"$regex": "jon", "$options": "i"}})
    assert not matches(document, {"username": {"$regex": "jon"}})
    assert matches(document, {"is_approved": {"$ne": True}})
    assert matches(document, {"username": {"$in": ["Jonas", "Maria"]}})
    assert not matches(document, {"email": {"$regex": "x"}})

    with pytest.raises(ValueError):
        matches(document, {"username": {"$where": "1"}})

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from cardapp.core.errors import NotFoundError, StorageError, ValidationError
from cardapp.registry import repository as repo
from cardapp.registry import service as svc
from cardapp.registry.schemas import ProfileSnapshot


def _profile(username, display_name=None, **extra):
    return ProfileSnapshot(
        username=username,
        display_name=display_name if display_name is not None else username.title(),
        **extra,
    )


async def _register(session_factory, profile):
    async with session_factory() as s:
        return await svc.register_or_update(s, profile)


async def _counter(session_factory):
    async with session_factory() as s:
        return await repo.get_counter(s)


@pytest.mark.asyncio
async def test_alice_bob_scenario(session_factory):
    first = await _register(session_factory, _profile("alice", followers=10))
    assert (first.user_number, first.is_new_user) == (1, True)

    bob = await _register(session_factory, _profile("bob"))
    assert (bob.user_number, bob.is_new_user) == (2, True)

    again = await _register(session_factory, _profile("alice", followers=500))
    assert (again.user_number, again.is_new_user) == (1, False)
    assert again.user.followers == 500

    async with session_factory() as s:
        card = await svc.lookup(s, "alice")
    assert card.user_number == 1
    assert card.followers == 500
    assert await _counter(session_factory) == 2


@pytest.mark.asyncio
async def test_reregister_updates_fields_but_keeps_number_and_created_at(session_factory):
    await _register(session_factory, _profile("alice", bio="old bio", location="Seoul"))
    async with session_factory() as s:
        before = await svc.lookup(s, "alice")

    await _register(
        session_factory,
        _profile("alice", "Alice Liddell", bio="new bio", following=3, verified=True),
    )
    async with session_factory() as s:
        after = await svc.lookup(s, "alice")

    assert after.user_number == before.user_number == 1
    assert after.display_name == "Alice Liddell"
    assert after.bio == "new bio"
    assert after.following == 3
    assert after.verified is True
    # campos no enviados quedan vacíos (el snapshot manda)
    assert after.location is None
    assert after.created_at == before.created_at
    assert after.updated_at >= before.updated_at


@pytest.mark.asyncio
async def test_username_is_case_sensitive(session_factory):
    lower = await _register(session_factory, _profile("alice"))
    upper = await _register(session_factory, _profile("Alice"))
    assert lower.user_number == 1
    assert upper.user_number == 2
    assert upper.is_new_user is True

    async with session_factory() as s:
        with pytest.raises(NotFoundError):
            await svc.lookup(s, "ALICE")
        with pytest.raises(NotFoundError):
            await svc.lookup(s, " alice")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"username": "", "display_name": "x"},
        {"username": "   ", "display_name": "x"},
        {"username": "alice", "display_name": ""},
        {"username": None, "display_name": "x"},
        {"username": "alice", "display_name": None},
        {"username": "alice", "display_name": "x", "followers": -1},
        {"username": "alice", "display_name": "x", "followers": 2**63},
        {"username": "alice", "display_name": "x", "following": 2**63},
    ],
)
async def test_validation_error_has_no_side_effects(session_factory, kwargs):
    with pytest.raises(ValidationError):
        await _register(session_factory, ProfileSnapshot(**kwargs))

    assert await _counter(session_factory) == 0
    async with session_factory() as s:
        assert await repo.count_users(s) == 0


@pytest.mark.asyncio
async def test_lookup_miss(db):
    with pytest.raises(NotFoundError):
        await svc.lookup(db, "never-seen")


@pytest.mark.asyncio
async def test_concurrent_new_users_get_dense_numbers(session_factory):
    names = [f"user{i}" for i in range(8)]
    results = await asyncio.gather(
        *[_register(session_factory, _profile(n)) for n in names]
    )

    assert sorted(r.user_number for r in results) == list(range(1, 9))
    assert all(r.is_new_user for r in results)
    assert await _counter(session_factory) == 8


@pytest.mark.asyncio
async def test_concurrent_same_new_username_gets_one_number(session_factory):
    results = await asyncio.gather(
        _register(session_factory, _profile("carol", followers=1)),
        _register(session_factory, _profile("carol", followers=2)),
    )

    assert {r.user_number for r in results} == {1}
    assert sorted(r.is_new_user for r in results) == [False, True]
    assert await _counter(session_factory) == 1
    async with session_factory() as s:
        assert await repo.count_users(s) == 1


@pytest.mark.asyncio
async def test_stale_read_conflict_retries_into_update_branch(session_factory, monkeypatch):
    await _register(session_factory, _profile("alice"))

    real_get = repo.get_by_username
    calls = {"n": 0}

    async def stale_get(db, username):
        # el primer intento "no ve" la fila, como si otra request la hubiera creado recién
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_get(db, username)

    monkeypatch.setattr(repo, "get_by_username", stale_get)

    result = await _register(session_factory, _profile("alice", bio="again"))

    assert calls["n"] == 2
    assert (result.user_number, result.is_new_user) == (1, False)
    assert result.user.bio == "again"
    # el +1 del intento perdido se deshizo con el rollback
    assert await _counter(session_factory) == 1


@pytest.mark.asyncio
async def test_fault_after_increment_rolls_back_counter(session_factory, monkeypatch):
    await _register(session_factory, _profile("alice"))

    async def boom(db, *, user_number, profile):
        raise RuntimeError("crash before insert")

    monkeypatch.setattr(repo, "create_user_card", boom)

    with pytest.raises(RuntimeError):
        await _register(session_factory, _profile("bob"))

    assert await _counter(session_factory) == 1
    async with session_factory() as s:
        assert await repo.get_by_username(s, "bob") is None

    monkeypatch.undo()
    bob = await _register(session_factory, _profile("bob"))
    # ningún número perdido
    assert bob.user_number == 2


@pytest.mark.asyncio
async def test_conflict_retries_exhausted_raise_storage_error(session_factory, monkeypatch):
    async def always_conflict(db, *, user_number, profile):
        raise IntegrityError("INSERT INTO user_cards", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(repo, "create_user_card", always_conflict)

    async with session_factory() as s:
        with pytest.raises(StorageError):
            await svc.register_or_update(s, _profile("alice"), max_attempts=2)

    assert await _counter(session_factory) == 0


@pytest.mark.asyncio
async def test_database_failure_is_storage_error(session_factory, monkeypatch):
    async def down(db, username):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    monkeypatch.setattr(repo, "get_by_username", down)

    with pytest.raises(StorageError):
        await _register(session_factory, _profile("alice"))
    async with session_factory() as s:
        with pytest.raises(StorageError):
            await svc.lookup(s, "alice")


@pytest.mark.asyncio
async def test_stats(session_factory):
    for name in ("alice", "bob", "carol"):
        await _register(session_factory, _profile(name))
    await _register(session_factory, _profile("alice", bio="again"))

    async with session_factory() as s:
        stats = await svc.get_stats(s, limit=2)

    assert stats.total_users == 3
    assert stats.current_counter == 3
    assert len(stats.recent_users) == 2
    assert stats.recent_users[0].username == "carol"


@pytest.mark.asyncio
async def test_follower_counts_beyond_int32_are_stored(session_factory):
    result = await _register(
        session_factory, _profile("bigaccount", followers=3_000_000_000, following=2**63 - 1)
    )
    assert result.is_new_user is True

    async with session_factory() as s:
        card = await svc.lookup(s, "bigaccount")
    assert card.followers == 3_000_000_000
    assert card.following == 2**63 - 1

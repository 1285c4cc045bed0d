import pytest

from core.security import verify_secret
from users.entity import AGE_OUT_OF_RANGE, NAME_TOO_SHORT
from users.repository import EMAIL_TAKEN, Failure


async def _create(repo, **data):
    result = await repo.create(data)
    assert result.success, result.errors
    return result.user


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamps(repo):
    user = await _create(repo, name="Ana Silva", email="ana@test.com", age=30)
    assert user.id == 1
    assert user.is_active is True
    assert user.created_at is not None
    assert user.created_at == user.updated_at


@pytest.mark.asyncio
async def test_ids_increase(repo):
    first = await _create(repo, name="Ana", email="ana@test.com")
    second = await _create(repo, name="Bob", email="bob@test.com")
    assert second.id > first.id


@pytest.mark.asyncio
async def test_short_name_is_rejected_and_not_stored(repo):
    result = await repo.create({"name": " A ", "email": "a@test.com"})
    assert result.success is False
    assert result.failure is Failure.VALIDATION
    assert NAME_TOO_SHORT in result.errors
    assert await repo.count() == 0
    assert await repo.email_exists("a@test.com") is False


@pytest.mark.asyncio
async def test_age_out_of_range_is_rejected(repo):
    result = await repo.create({"name": "Jo", "email": "jo@test.com", "age": 200})
    assert result.success is False
    assert result.errors == [AGE_OUT_OF_RANGE]
    assert await repo.count() == 0


@pytest.mark.asyncio
async def test_created_user_round_trips(repo):
    created = await _create(repo, name="Ana Silva", email="ana@test.com", age=30)
    found = await repo.find_by_id(created.id)
    assert found is not None
    assert found.to_public_view() == created.to_public_view()


@pytest.mark.asyncio
async def test_list_view_of_created_user(repo):
    user = await _create(repo, name="Ana Silva", email="ana@test.com", age=30)
    assert user.to_list_view() == {"name": "Ana Silva", "email": "ana@test.com", "age": 30}


@pytest.mark.asyncio
async def test_name_and_email_are_trimmed(repo):
    user = await _create(repo, name="  Ana Silva ", email=" Ana@Test.com  ")
    assert user.name == "Ana Silva"
    assert user.email == "Ana@Test.com"


@pytest.mark.asyncio
async def test_duplicate_email_ignores_case(repo):
    await _create(repo, name="Ana", email="A@x.com")
    result = await repo.create({"name": "Other", "email": "a@X.com"})
    assert result.success is False
    assert result.failure is Failure.CONFLICT
    assert result.errors == [EMAIL_TAKEN]
    assert await repo.count() == 1


@pytest.mark.asyncio
async def test_invalid_input_reports_validation_before_conflict(repo):
    await _create(repo, name="Ana", email="ana@test.com")
    result = await repo.create({"name": "A", "email": "ana@test.com"})
    assert result.failure is Failure.VALIDATION
    assert result.errors == [NAME_TOO_SHORT]


@pytest.mark.asyncio
async def test_secret_is_hashed(repo, store):
    user = await _create(repo, name="Ana", email="ana@test.com", secret="hunter22")
    row = await store.fetch_by_id(user.id)
    assert row["secret"] != "hunter22"
    assert verify_secret("hunter22", row["secret"])
    assert "secret" not in user.to_public_view()


@pytest.mark.asyncio
async def test_find_by_email_is_case_insensitive(repo):
    user = await _create(repo, name="Ana", email="Ana@Test.com")
    found = await repo.find_by_email("ana@test.COM")
    assert found is not None
    assert found.id == user.id


@pytest.mark.asyncio
async def test_find_all_excludes_deleted(repo):
    keep = await _create(repo, name="Ana", email="ana@test.com")
    gone = await _create(repo, name="Bob", email="bob@test.com")

    assert await repo.delete(gone.id) is True

    users = await repo.find_all()
    assert [u.id for u in users] == [keep.id]
    assert await repo.count() == 1


@pytest.mark.asyncio
async def test_deleted_user_is_hidden_from_reads(repo, store):
    user = await _create(repo, name="Ana", email="ana@test.com")
    await repo.delete(user.id)

    assert await repo.find_by_id(user.id) is None
    assert await repo.find_by_email("ana@test.com") is None

    row = await store.fetch_by_id(user.id, active_only=False)
    assert row is not None
    assert row["is_active"] == 0


@pytest.mark.asyncio
async def test_deleted_email_stays_reserved(repo):
    user = await _create(repo, name="Ana", email="ana@test.com")
    await repo.delete(user.id)

    assert await repo.email_exists("ANA@test.com") is True
    result = await repo.create({"name": "Ana Again", "email": "ana@test.com"})
    assert result.failure is Failure.CONFLICT


@pytest.mark.asyncio
async def test_delete_twice(repo, store):
    user = await _create(repo, name="Ana", email="ana@test.com")

    assert await repo.delete(user.id) is True
    first = await store.fetch_by_id(user.id, active_only=False)
    assert first["updated_at"] >= user.updated_at

    assert await repo.delete(user.id) is False
    second = await store.fetch_by_id(user.id, active_only=False)
    assert second["updated_at"] == first["updated_at"]


@pytest.mark.asyncio
async def test_delete_unknown_id(repo):
    assert await repo.delete(404) is False


@pytest.mark.asyncio
async def test_update_applies_only_present_fields(repo):
    user = await _create(repo, name="Ana Silva", email="ana@test.com", age=30)

    result = await repo.update(user.id, {"age": 31})
    assert result.success is True
    assert result.user.name == "Ana Silva"
    assert result.user.email == "ana@test.com"
    assert result.user.age == 31
    assert result.user.created_at == user.created_at
    assert result.user.updated_at >= user.updated_at


@pytest.mark.asyncio
async def test_update_can_clear_age(repo):
    user = await _create(repo, name="Ana", email="ana@test.com", age=30)
    result = await repo.update(user.id, {"age": None})
    assert result.success is True
    assert result.user.age is None


@pytest.mark.asyncio
async def test_update_ignores_protected_fields(repo, store):
    user = await _create(repo, name="Ana", email="ana@test.com", secret="hunter22")
    before = await store.fetch_by_id(user.id)

    result = await repo.update(
        user.id,
        {"id": 99, "secret": "changed", "is_active": False, "name": "Ana Maria"},
    )
    assert result.success is True
    assert result.user.id == user.id
    assert result.user.is_active is True

    after = await store.fetch_by_id(user.id)
    assert after["secret"] == before["secret"]
    assert after["name"] == "Ana Maria"


@pytest.mark.asyncio
async def test_update_unknown_or_deleted_is_not_found(repo):
    result = await repo.update(12, {"name": "Nobody"})
    assert result.success is False
    assert result.failure is Failure.NOT_FOUND
    assert result.errors == []

    user = await _create(repo, name="Ana", email="ana@test.com")
    await repo.delete(user.id)
    result = await repo.update(user.id, {"name": "Ana Back"})
    assert result.failure is Failure.NOT_FOUND


@pytest.mark.asyncio
async def test_update_email_taken_by_other_active_user(repo):
    ana = await _create(repo, name="Ana", email="ana@test.com")
    await _create(repo, name="Bob", email="bob@test.com")

    result = await repo.update(ana.id, {"email": "BOB@test.com"})
    assert result.success is False
    assert result.failure is Failure.CONFLICT
    assert result.errors == [EMAIL_TAKEN]

    unchanged = await repo.find_by_id(ana.id)
    assert unchanged.email == "ana@test.com"


@pytest.mark.asyncio
async def test_update_email_taken_by_deleted_user(repo):
    ana = await _create(repo, name="Ana", email="ana@test.com")
    bob = await _create(repo, name="Bob", email="bob@test.com")
    await repo.delete(bob.id)

    result = await repo.update(ana.id, {"email": "bob@test.com"})
    assert result.failure is Failure.CONFLICT


@pytest.mark.asyncio
async def test_update_own_email_case_change(repo):
    ana = await _create(repo, name="Ana", email="ana@test.com")
    result = await repo.update(ana.id, {"email": "ANA@test.com"})
    assert result.success is True
    assert result.user.email == "ANA@test.com"


@pytest.mark.asyncio
async def test_update_invalid_is_not_persisted(repo):
    ana = await _create(repo, name="Ana", email="ana@test.com", age=30)

    result = await repo.update(ana.id, {"name": "A", "age": 151})
    assert result.success is False
    assert result.failure is Failure.VALIDATION
    assert result.errors == [NAME_TOO_SHORT, AGE_OUT_OF_RANGE]

    stored = await repo.find_by_id(ana.id)
    assert stored.name == "Ana"
    assert stored.age == 30

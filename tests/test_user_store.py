"""
Tests for the SQLAlchemy user store, run against a SQLite file database.
"""

import asyncio

import pytest
import pytest_asyncio

from config.settings import Settings
from database.session import build_engine, build_session_factory
from database.user_store import DuplicateEmailError, UserStore


@pytest_asyncio.fixture
async def db_store(tmp_path):
    settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    engine = build_engine(settings)
    user_store = UserStore(build_session_factory(engine))
    await user_store.create_schema(engine)
    yield user_store
    await engine.dispose()


class TestUserStore:
    @pytest.mark.asyncio
    async def test_create_and_find(self, db_store):
        created = await db_store.create_user("Ana", "ana@example.com", "$2b$10$digest")

        assert created.id >= 1
        assert created.created_at is not None

        found = await db_store.find_user_by_email("ana@example.com")
        assert found is not None
        assert found.id == created.id
        assert found.name == "Ana"
        assert found.password_hash == "$2b$10$digest"

        by_id = await db_store.find_user_by_id(created.id)
        assert by_id.email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_missing_user_is_none(self, db_store):
        assert await db_store.find_user_by_email("nobody@example.com") is None
        assert await db_store.find_user_by_id(12345) is None

    @pytest.mark.asyncio
    async def test_name_may_be_null(self, db_store):
        created = await db_store.create_user(None, "anon@example.com", "h")
        assert (await db_store.find_user_by_id(created.id)).name is None

    @pytest.mark.asyncio
    async def test_duplicate_email_raises_conflict(self, db_store):
        first = await db_store.create_user("Ana", "dup@example.com", "h1")

        with pytest.raises(DuplicateEmailError) as excinfo:
            await db_store.create_user("Other", "dup@example.com", "h2")
        assert excinfo.value.email == "dup@example.com"

        found = await db_store.find_user_by_email("dup@example.com")
        assert found.id == first.id
        assert found.password_hash == "h1"

    @pytest.mark.asyncio
    async def test_emails_are_case_sensitive(self, db_store):
        await db_store.create_user(None, "Mixed@example.com", "h")
        await db_store.create_user(None, "mixed@example.com", "h")
        assert await db_store.find_user_by_email("MIXED@example.com") is None

    @pytest.mark.asyncio
    async def test_concurrent_inserts_yield_one_conflict(self, db_store):
        results = await asyncio.gather(
            db_store.create_user("One", "race@example.com", "h1"),
            db_store.create_user("Two", "race@example.com", "h2"),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, DuplicateEmailError)]
        created = [r for r in results if not isinstance(r, BaseException)]
        assert len(conflicts) == 1
        assert len(created) == 1
        assert (await db_store.find_user_by_email("race@example.com")).id == created[0].id

    @pytest.mark.asyncio
    async def test_ping(self, db_store):
        assert await db_store.ping() is True

    @pytest.mark.asyncio
    async def test_ping_unreachable_database(self, tmp_path):
        missing_dir = tmp_path / "does-not-exist" / "users.db"
        engine = build_engine(Settings(database_url=f"sqlite+aiosqlite:///{missing_dir}"))
        try:
            assert await UserStore(build_session_factory(engine)).ping() is False
        finally:
            await engine.dispose()

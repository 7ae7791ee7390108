"""
Pytest configuration and fixtures for CampusBook tests.

Provides shared fixtures for:
- In-memory storage medium and document store
- Auth service bound to the same storage scope
- Ready-made student and teacher profiles
"""

import pytest

from campusbook.auth import AuthService
from campusbook.common.settings import get_settings
from campusbook.docstore import LocalDocumentStore
from campusbook.models import UserProfile
from campusbook.records.users import create_user_profile
from campusbook.storage import MemoryStorage


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables and drop cached settings."""
    monkeypatch.setenv("CAMPUSBOOK_APP_ENV", "test")
    monkeypatch.setenv("CAMPUSBOOK_STORAGE_BACKEND", "memory")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage():
    return MemoryStorage(scope="test")


@pytest.fixture
def store(storage):
    return LocalDocumentStore(storage)


@pytest.fixture
def auth(storage):
    return AuthService(storage)


@pytest.fixture
async def student(store):
    profile = UserProfile(
        uid="student-1",
        name="Sam Student",
        email="sam@example.com",
        role="student",
        student_id="S-1001",
        year_of_study="2",
    )
    return await create_user_profile(store, profile)


@pytest.fixture
async def teacher(store):
    profile = UserProfile(
        uid="teacher-1",
        name="Dr. Tina Teacher",
        email="tina@example.com",
        role="teacher",
        status="approved",
        department="Physics",
        subject="Optics",
    )
    return await create_user_profile(store, profile)

import os

os.environ.setdefault("PUBLIC_SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SECRET_API_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-1234")

import pytest

from gooddeeds.core.dependencies import UserContext

from fakes import ALICE, BOB, CAROL, FakeSupabase, InMemoryChatBackend, profile


@pytest.fixture
def alice():
    return UserContext(user_id=ALICE, email="alice@example.com")


@pytest.fixture
def bob():
    return UserContext(user_id=BOB, email="bob@example.com")


@pytest.fixture
def backend():
    return InMemoryChatBackend(
        profiles=[profile(ALICE, "Alice"), profile(BOB, "Bob"), profile(CAROL, "Carol")]
    )


@pytest.fixture
def supabase_fake():
    return FakeSupabase()

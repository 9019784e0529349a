import pytest

from tests.fakes import FakeCommunityStore


@pytest.fixture
def fake_store() -> FakeCommunityStore:
    return FakeCommunityStore()

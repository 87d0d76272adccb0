import json
from typing import Any

import pytest
from pytest_mock import MockerFixture

from culqi_backend.cache.repositories import (
    InMemoryTokenCacheRepository,
    RedisTokenCacheRepository,
)
from tests.utils import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository(clock: FakeClock) -> InMemoryTokenCacheRepository:
    return InMemoryTokenCacheRepository(clock=clock)


@pytest.fixture
def mock_redis(mocker: MockerFixture) -> Any:
    return mocker.Mock()


@pytest.fixture
def redis_repository(mock_redis: Any) -> Any:
    return RedisTokenCacheRepository(redis=mock_redis)


def test_in_memory_repository_returns_entry_within_ttl(
    repository: InMemoryTokenCacheRepository, clock: FakeClock
) -> None:
    repository.set("fingerprint", {"id": "tok_a1"}, ttl=300)
    clock.advance(299.9)

    assert repository.get("fingerprint") == {"id": "tok_a1"}


def test_in_memory_repository_drops_expired_entry(
    repository: InMemoryTokenCacheRepository, clock: FakeClock
) -> None:
    repository.set("fingerprint", {"id": "tok_a1"}, ttl=300)
    clock.advance(300)

    assert repository.get("fingerprint") is None
    assert "fingerprint" not in repository.storage


def test_in_memory_repository_unknown_key(
    repository: InMemoryTokenCacheRepository,
) -> None:
    assert repository.get("unknown") is None


def test_in_memory_repository_overwrites_entry(
    repository: InMemoryTokenCacheRepository, clock: FakeClock
) -> None:
    repository.set("fingerprint", {"id": "tok_a1"}, ttl=300)
    clock.advance(200)
    repository.set("fingerprint", {"id": "tok_b2"}, ttl=300)
    clock.advance(200)

    assert repository.get("fingerprint") == {"id": "tok_b2"}


def test_in_memory_repository_sweeps_expired_entries_on_write(
    repository: InMemoryTokenCacheRepository, clock: FakeClock
) -> None:
    for index in range(1000):
        repository.set(f"fingerprint_{index}", {"id": f"tok_{index}"}, ttl=3600)
    clock.advance(3600)

    repository.set("fingerprint_new", {"id": "tok_new"}, ttl=3600)

    assert list(repository.storage) == ["fingerprint_new"]


def test_in_memory_repository_keeps_live_entries_when_sweeping(
    repository: InMemoryTokenCacheRepository, clock: FakeClock
) -> None:
    repository.set("short", {"id": "tok_a1"}, ttl=60)
    repository.set("long", {"id": "tok_b2"}, ttl=600)
    clock.advance(60)

    repository.purge_expired(clock())

    assert list(repository.storage) == ["long"]


def test_in_memory_repository_returns_a_copy(
    repository: InMemoryTokenCacheRepository,
) -> None:
    repository.set("fingerprint", {"id": "tok_a1", "iin": {"bin": "411111"}}, ttl=300)

    cached = repository.get("fingerprint")
    assert cached is not None
    cached["id"] = "tok_tampered"
    cached["iin"]["bin"] = "000000"

    assert repository.get("fingerprint") == {"id": "tok_a1", "iin": {"bin": "411111"}}


def test_in_memory_repository_stores_a_copy(
    repository: InMemoryTokenCacheRepository,
) -> None:
    token = {"id": "tok_a1"}
    repository.set("fingerprint", token, ttl=300)
    token["id"] = "tok_tampered"

    assert repository.get("fingerprint") == {"id": "tok_a1"}


def test_redis_get_existing_token(
    redis_repository: RedisTokenCacheRepository, mock_redis: Any
) -> None:
    mock_redis.get.return_value = json.dumps({"id": "tok_a1"})

    assert redis_repository.get("fingerprint") == {"id": "tok_a1"}
    mock_redis.get.assert_called_once_with("token:fingerprint")


def test_redis_get_missing_token(
    redis_repository: RedisTokenCacheRepository, mock_redis: Any
) -> None:
    mock_redis.get.return_value = None

    assert redis_repository.get("fingerprint") is None


def test_redis_set_uses_ttl(
    redis_repository: RedisTokenCacheRepository, mock_redis: Any
) -> None:
    redis_repository.set("fingerprint", {"id": "tok_a1"}, ttl=300)

    mock_redis.setex.assert_called_once_with(
        "token:fingerprint", 300, json.dumps({"id": "tok_a1"})
    )


def test_redis_set_failure(
    redis_repository: RedisTokenCacheRepository, mock_redis: Any
) -> None:
    mock_redis.setex.side_effect = Exception("Redis error")

    with pytest.raises(Exception, match="Error caching token fingerprint: Redis error"):
        redis_repository.set("fingerprint", {"id": "tok_a1"}, ttl=300)

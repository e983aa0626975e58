"""Tests for anonymous actor derivation."""

import pytest

from reveal_api.core.errors import ActorUnavailableError
from reveal_api.services.identity import (
    ACTOR_ID_BYTES,
    ActorIdentityResolver,
    actor_tag,
    derive_salt_key,
    normalise_origin,
    resolve_actor_id,
)


def test_same_origin_and_salt_yield_same_actor() -> None:
    resolver = ActorIdentityResolver("salt-a")
    first = resolver.resolve("203.0.113.7")
    assert first == resolver.resolve("203.0.113.7")
    assert len(first) == ACTOR_ID_BYTES


def test_distinct_origins_yield_distinct_actors() -> None:
    resolver = ActorIdentityResolver("salt-a")
    assert resolver.resolve("203.0.113.7") != resolver.resolve("203.0.113.8")


def test_salt_changes_actor() -> None:
    origin = "203.0.113.7"
    assert ActorIdentityResolver("salt-a").resolve(origin) != ActorIdentityResolver(
        "salt-b"
    ).resolve(origin)


def test_actor_id_does_not_contain_origin_bytes() -> None:
    actor_id = ActorIdentityResolver("salt-a").resolve("203.0.113.7")
    assert bytes([203, 0, 113, 7]) not in actor_id
    assert b"203.0.113.7" not in actor_id


def test_ipv4_and_mapped_ipv6_are_the_same_actor() -> None:
    resolver = ActorIdentityResolver("salt-a")
    assert resolver.resolve("192.0.2.1") == resolver.resolve("::ffff:192.0.2.1")
    assert normalise_origin(" 192.0.2.1 ") == normalise_origin("::ffff:192.0.2.1")


def test_non_ip_origin_is_hashed_verbatim() -> None:
    assert normalise_origin("testclient") == b"testclient"


def test_resolver_matches_pure_derivation() -> None:
    resolver = ActorIdentityResolver("salt-a")
    assert resolver.resolve("2001:db8::1") == resolve_actor_id("2001:db8::1", derive_salt_key("salt-a"))


@pytest.mark.parametrize("origin", [None, "", "   "])
def test_missing_origin_is_rejected(origin) -> None:
    resolver = ActorIdentityResolver("salt-a")
    with pytest.raises(ActorUnavailableError):
        resolver.resolve(origin)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        ActorIdentityResolver("")


def test_rotation_changes_actor_between_epochs(clock) -> None:
    resolver = ActorIdentityResolver("salt-a", rotation_seconds=3600, clock=clock)
    clock.now = 7200.0
    before = resolver.resolve("198.51.100.4")
    assert resolver.current_epoch() == 2

    clock.advance(1800)
    assert resolver.resolve("198.51.100.4") == before

    clock.advance(1800)
    assert resolver.current_epoch() == 3
    assert resolver.resolve("198.51.100.4") != before


def test_rotation_disabled_has_no_epoch() -> None:
    assert ActorIdentityResolver("salt-a").current_epoch() is None


def test_actor_tag_is_short_prefix() -> None:
    actor_id = ActorIdentityResolver("salt-a").resolve("198.51.100.4")
    assert actor_tag(actor_id) == actor_id.hex()[:12]

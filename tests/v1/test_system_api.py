"""Tests for system endpoints and request plumbing."""

from types import SimpleNamespace

import pytest
from fastapi import status

from reveal_api.api.v1.dependencies import get_current_actor, get_optional_actor, request_origin
from reveal_api.core.errors import ActorUnavailableError
from reveal_api.core.settings import settings


def test_public_config(client) -> None:
    response = client.get("/api/v1/system/config")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["rate_limits"]["vote"] == {"max_actions": 30, "window_seconds": 120}
    assert body["limits"]["post_content"] == [10, 5000]
    assert "spam" in body["flag_reasons"]
    assert "actor_salt" not in str(body)


def _request(headers=None, host="192.0.2.50"):
    client = SimpleNamespace(host=host) if host else None
    return SimpleNamespace(headers=headers or {}, client=client)


def test_origin_uses_hop_added_by_trusted_proxy() -> None:
    """Client-supplied hops to the left of the proxy are ignored."""
    request = _request({"x-forwarded-for": "10.9.9.1, 203.0.113.5"})
    assert request_origin(request) == "203.0.113.5"


def test_origin_with_two_trusted_proxies(monkeypatch) -> None:
    monkeypatch.setattr(settings, "trusted_proxy_count", 2)
    request = _request({"x-forwarded-for": "10.9.9.1, 203.0.113.5, 10.0.0.2"})
    assert request_origin(request) == "203.0.113.5"


def test_short_forwarded_chain_falls_back_to_peer(monkeypatch) -> None:
    monkeypatch.setattr(settings, "trusted_proxy_count", 2)
    request = _request({"x-forwarded-for": "203.0.113.5"})
    assert request_origin(request) == "192.0.2.50"


def test_spoofed_leading_hops_share_one_budget(client) -> None:
    """Rotating the client-written hop does not mint new actors."""
    payload = {"title": "Spoof", "content": "rotating my forwarded-for"}
    codes = [
        client.post(
            "/api/v1/posts",
            json=payload,
            headers={"X-Forwarded-For": f"10.9.9.{i}, 203.0.113.5"},
        ).status_code
        for i in range(8)
    ]
    assert codes == [201] * 5 + [429] * 3


def test_origin_ignores_forwarded_for_when_untrusted(monkeypatch) -> None:
    monkeypatch.setattr(settings, "trust_forwarded_for", False)
    request = _request({"x-forwarded-for": "203.0.113.5"})
    assert request_origin(request) == "192.0.2.50"


def test_missing_origin_rejects_mutations(resolver) -> None:
    with pytest.raises(ActorUnavailableError):
        get_current_actor(_request(host=None), resolver)
    assert get_optional_actor(_request(host=None), resolver) is None


def test_falls_back_to_socket_peer(client) -> None:
    """Without a forwarded header the TestClient peer is the actor."""
    response = client.post(
        "/api/v1/posts",
        json={"title": "Direct", "content": "no proxy in front of me"},
    )
    assert response.status_code == status.HTTP_201_CREATED

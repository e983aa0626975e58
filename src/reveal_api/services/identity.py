"""Anonymous actor identity derived from request origin metadata.

An ActorId is a keyed BLAKE3 digest of the normalised client address. The key
is derived from the server secret (and, when rotation is enabled, the current
rotation epoch), so ids are stable within a salt period, unlinkable across
periods and never reversible to the address. The raw origin is only ever held
in memory for the duration of ``resolve``.
"""

from __future__ import annotations

import ipaddress
import logging
import time
from collections.abc import Callable
from functools import lru_cache

from blake3 import blake3

from reveal_api.core.errors import ActorUnavailableError
from reveal_api.core.settings import settings

logger = logging.getLogger(__name__)

ACTOR_ID_BYTES = 32
_SALT_CONTEXT = "reveal-api 2024-01-01 actor salt v1"
_IPV4_MAPPED_PREFIX = bytes(10) + b"\xff\xff"


def normalise_origin(origin: str) -> bytes:
    """Return canonical bytes for an origin value.

    IPv4 addresses are mapped into IPv6 space so that ``1.2.3.4`` and
    ``::ffff:1.2.3.4`` name the same actor. Values that are not IP addresses
    are used verbatim.
    """
    value = origin.strip()
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return value.encode("utf-8")
    if isinstance(address, ipaddress.IPv4Address):
        return _IPV4_MAPPED_PREFIX + address.packed
    return address.packed


def derive_salt_key(secret: str | bytes, epoch: int | None = None) -> bytes:
    """Derive the 32-byte hashing key for a secret and optional rotation epoch."""
    material = secret.encode("utf-8") if isinstance(secret, str) else secret
    if epoch is not None:
        material += b":" + str(epoch).encode("ascii")
    return blake3(material, derive_key_context=_SALT_CONTEXT).digest()


def resolve_actor_id(origin: str, salt_key: bytes) -> bytes:
    """Pure derivation of an ActorId from an origin and a derived salt key."""
    return blake3(normalise_origin(origin), key=salt_key).digest(length=ACTOR_ID_BYTES)


def actor_tag(actor_id: bytes) -> str:
    """Short, log-safe label for an ActorId."""
    return actor_id.hex()[:12]


class ActorIdentityResolver:
    """Resolve request origins to ActorIds under the active salt."""

    def __init__(
        self,
        secret: str | bytes,
        *,
        rotation_seconds: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("actor salt secret must not be empty")
        self._secret = secret
        self._rotation_seconds = rotation_seconds
        self._clock = clock
        self._static_key = derive_salt_key(secret) if rotation_seconds <= 0 else None

    def current_epoch(self) -> int | None:
        """Return the active rotation epoch, or None when rotation is disabled."""
        if self._rotation_seconds <= 0:
            return None
        return int(self._clock() // self._rotation_seconds)

    def _salt_key(self) -> bytes:
        if self._static_key is not None:
            return self._static_key
        return derive_salt_key(self._secret, self.current_epoch())

    def resolve(self, origin: str | None) -> bytes:
        """Return the ActorId for ``origin``.

        Raises:
            ActorUnavailableError: If no origin metadata is available. There is
                no shared fallback id; the action is rejected instead.
        """
        if origin is None or not origin.strip():
            logger.info("Rejecting request without origin metadata")
            raise ActorUnavailableError("Unable to identify request origin")
        return resolve_actor_id(origin, self._salt_key())


@lru_cache(maxsize=1)
def get_identity_resolver() -> ActorIdentityResolver:
    """Return the process-wide resolver configured from settings."""
    return ActorIdentityResolver(
        settings.actor_salt,
        rotation_seconds=settings.actor_salt_rotation_seconds,
    )

"""Tests for the striped lock table."""

import threading

import pytest

from reveal_api.services.locks import KeyedLockTable


def test_same_key_maps_to_same_stripe() -> None:
    table = KeyedLockTable(16)
    key = ("post", "abc", b"\x01" * 32)
    assert table.stripe_for(key) == table.stripe_for(("post", "abc", b"\x01" * 32))
    assert 0 <= table.stripe_for(key) < len(table)


def test_hold_excludes_other_holders_of_the_key() -> None:
    table = KeyedLockTable(4)
    entered = threading.Event()

    with table.hold("k"):
        def _contend() -> None:
            with table.hold("k"):
                entered.set()

        worker = threading.Thread(target=_contend)
        worker.start()
        assert not entered.wait(0.1)
    worker.join(timeout=5)
    assert entered.is_set()


def test_stripes_must_be_positive() -> None:
    with pytest.raises(ValueError):
        KeyedLockTable(0)

"""Tests for the Observable mixin."""

from __future__ import annotations

import pytest

from ravendb_query import Observable


@pytest.fixture
def observable() -> Observable:
    return Observable()


def test_emit_calls_listeners_in_order(observable: Observable):
    calls: list[tuple[str, object]] = []
    observable.on("evt", lambda payload: calls.append(("first", payload)))
    observable.on("evt", lambda payload: calls.append(("second", payload)))

    observable.emit("evt", 42)

    assert calls == [("first", 42), ("second", 42)]


def test_listener_registered_once(observable: Observable):
    calls: list[int] = []

    def listener() -> None:
        calls.append(1)

    observable.on("evt", listener)
    observable.on("evt", listener)
    observable.emit("evt")

    assert calls == [1]
    assert observable.listener_count("evt") == 1


def test_off(observable: Observable):
    calls: list[str] = []

    def a() -> None:
        calls.append("a")

    def b() -> None:
        calls.append("b")

    observable.on("evt", a)
    observable.on("evt", b)
    observable.off("evt", a)
    observable.emit("evt")
    observable.off("evt")
    observable.emit("evt")

    assert calls == ["b"]


def test_emit_without_listeners(observable: Observable):
    observable.emit("nothing", 1, 2)


def test_listener_error_propagates(observable: Observable):
    def broken() -> None:
        raise RuntimeError("listener failed")

    observable.on("evt", broken)
    with pytest.raises(RuntimeError, match="listener failed"):
        observable.emit("evt")

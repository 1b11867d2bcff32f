"""Broker selection for the status publishing actor.

The actor is declared at import time, so the broker must be settled before
:mod:`herald.publisher.scheduler` is imported. Under pytest, or when
``HERALD_ALLOW_STUB_BROKER`` is truthy, an in-memory StubBroker is installed
and consumed by an in-process worker; otherwise Dramatiq's configured broker
is used.
"""

from __future__ import annotations

import os
import sys
import threading

import dramatiq
from dramatiq.brokers.stub import StubBroker

_BROKER_LOCK = threading.Lock()
_broker: dramatiq.Broker | None = None


def _is_running_tests() -> bool:
    """Return True when running under pytest or pytest-xdist."""
    return "pytest" in sys.modules or any(
        key in os.environ
        for key in ["PYTEST_CURRENT_TEST", "PYTEST_XDIST_WORKER", "PYTEST_ADDOPTS"]
    )


def _should_use_stub_broker() -> bool:
    allow_stub = os.environ.get("HERALD_ALLOW_STUB_BROKER", "")
    return allow_stub.lower() in {"1", "true", "yes"} or _is_running_tests()


def ensure_broker_configured() -> dramatiq.Broker:
    """Return the broker status updates are sent through.

    Thread-safe and idempotent: the first caller decides, later callers get
    the same broker.

    Raises
    ------
    RuntimeError
        If no stub is allowed and Dramatiq's default broker cannot be loaded.

    """
    global _broker

    if _broker is not None:
        return _broker

    with _BROKER_LOCK:
        if _broker is not None:
            return _broker

        if _should_use_stub_broker():
            broker: dramatiq.Broker = StubBroker()
            dramatiq.set_broker(broker)
        else:
            try:
                broker = dramatiq.get_broker()
            except ImportError as exc:  # pragma: no cover - prod misconfiguration
                message = (
                    "No Dramatiq broker configured. "
                    "Set HERALD_ALLOW_STUB_BROKER=1 for local runs "
                    "or configure a real broker before importing Herald."
                )
                raise RuntimeError(message) from exc

        _broker = broker
        return broker

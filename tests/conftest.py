"""Pytest configuration and fixtures for hookrelay tests.

This file intentionally keeps the test environment lean (no extra deps).
To support `async def` tests without pytest-asyncio, we provide a minimal
hook that runs coroutine test functions using the stdlib's asyncio.
"""

import asyncio
import inspect

import pytest

import hookrelay
from hookrelay import HookEngine


@pytest.fixture
def engine():
    """A fresh engine per test, disposed afterwards."""
    eng = HookEngine()
    yield eng
    eng.dispose()


@pytest.fixture(autouse=True)
def isolate_default_engine(tmp_path, monkeypatch):
    """Point the default engine at an empty config and drop it after each test."""
    monkeypatch.setenv("HOOKRELAY_CONFIG", str(tmp_path / "missing.json"))
    hookrelay.reset_default_engine()
    yield
    hookrelay.reset_default_engine()


def pytest_pyfunc_call(pyfuncitem: pytest.Item) -> bool | None:
    """Enable running `async def` tests without external plugins.

    If the test function is a coroutine function, execute it via asyncio.run.
    Return True to signal that the call was handled, allowing pytest to
    proceed without complaining about missing async plugins.
    """
    test_func = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_func):
        # Build the kwargs that pytest would normally inject (fixtures)
        kwargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        asyncio.run(test_func(**kwargs))
        return True
    return None

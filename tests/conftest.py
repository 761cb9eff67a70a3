"""Pytest configuration for the harness-electron test suite."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from harness_electron.commands.base import CommandContext
from harness_electron.config import load_config
from harness_electron.domains.session import SessionStore
from tests.helpers.fake_page import FakePage, FakePageOpener


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment and .env files out of every test."""
    for name in list(os.environ):
        if name.startswith("HARNESS_ELECTRON_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("harness_electron.config._ENV_LOADED", True)


@pytest.fixture
def session_dir(tmp_path: Path) -> Path:
    return tmp_path / ".harness-electron" / "sessions"


@pytest.fixture
def store(session_dir: Path) -> SessionStore:
    return SessionStore(session_dir, lock_timeout_ms=500)


@pytest.fixture
def connected(store: SessionStore):
    """A saved ``default`` session bound to app://index.html."""
    return store.save(
        "default",
        {
            "host": "127.0.0.1",
            "port": 9222,
            "wsEndpoint": "ws://127.0.0.1:9222/devtools/browser/abc",
            "targetId": "PAGE1",
            "targetUrl": "app://index.html",
            "targetTitle": "My App",
        },
    )


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def opener(page: FakePage) -> FakePageOpener:
    return FakePageOpener(page)


@pytest.fixture
def ctx(tmp_path: Path, store: SessionStore, opener: FakePageOpener, connected) -> CommandContext:
    config = load_config(cwd=tmp_path)
    return CommandContext(config=config, store=store, session_id="default", page_opener=opener)

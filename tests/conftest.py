"""Pytest fixtures for colocated tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from colocated.config import Settings, get_settings
from colocated.session import Session


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from COLOCATED_* variables and the cached settings."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("COLOCATED_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Development settings without types output."""
    return Settings(production=False, dedupe_fragments=True, visibility_policy="refcount")


@pytest.fixture
def production_settings() -> Settings:
    return Settings(production=True)


@pytest.fixture
def session(settings: Settings) -> Iterator[Session]:
    with Session(settings) as s:
        yield s


@pytest.fixture
def legacy_session() -> Iterator[Session]:
    """Session that hides a fragment as soon as any consumer unmounts."""
    with Session(Settings(visibility_policy="unconditional")) as s:
        yield s


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging so later tests see default propagation."""
    import logging

    logger = logging.getLogger("colocated")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate

"""Shared fixtures."""

import pytest

from fakes import FakeApp, FakeSession, FakeSessionFactory
from uiflow.core.config.main import RunConfig, TimeoutConfig, UiFlowConfig


@pytest.fixture
def app() -> FakeApp:
    return FakeApp()


@pytest.fixture
def session(app: FakeApp) -> FakeSession:
    return FakeSession(app)


@pytest.fixture
def factory(app: FakeApp) -> FakeSessionFactory:
    return FakeSessionFactory(app)


@pytest.fixture
def config() -> UiFlowConfig:
    """Defaults with timeouts short enough for failure paths to finish quickly."""
    return UiFlowConfig(
        timeouts=TimeoutConfig(case=10.0, expect=0.5, action=0.5, navigation=1.0, hydration=1.0),
        run=RunConfig(workers=4, retries=0),
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("UIFLOW_BASE_URL", raising=False)
    monkeypatch.delenv("UIFLOW_HEADLESS", raising=False)

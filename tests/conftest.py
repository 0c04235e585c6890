"""Shared fixtures for the ibmrp test suite."""
from unittest.mock import Mock

import pytest

from ibmrp.config.schemas.provider_schema import IBMProviderConfig
from ibmrp.infrastructure.registry.resource_registry import ResourceRegistry
from ibmrp.providers.ibm.ibm_client import IBMClientSession


class FakeClock:
    """Monotonic clock whose time only moves when sleep is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Clock and sleep pair that never blocks."""
    return FakeClock()


@pytest.fixture
def provider_config():
    return IBMProviderConfig(api_key="test-api-key", region="us-south")


@pytest.fixture
def session(provider_config):
    """IBMClientSession double whose client accessors return fixed mocks."""
    mock_session = Mock(spec=IBMClientSession)
    mock_session.config = provider_config
    mock_session.region = provider_config.region
    mock_session.resource_controller.return_value = Mock(name="resource_controller")
    mock_session.resource_manager.return_value = Mock(name="resource_manager")
    mock_session.global_catalog.return_value = Mock(name="global_catalog")
    mock_session.global_tagging.return_value = Mock(name="global_tagging")
    mock_session.cloud_databases.return_value = Mock(name="cloud_databases")
    mock_session.event_notifications.return_value = Mock(name="event_notifications")
    return mock_session


@pytest.fixture(autouse=True)
def reset_resource_registry():
    """Keep the process-wide registry from leaking between tests."""
    ResourceRegistry.reset_instance()
    yield
    ResourceRegistry.reset_instance()

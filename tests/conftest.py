"""
Pytest configuration and shared fixtures for soapwire tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from fixtures.soap_fixtures import make_envelope, make_noisy_body  # noqa: E402

from soapwire.config import HttpConfig, RuntimeConfig  # noqa: E402
from soapwire.http import MockTransport, SoapHttpClient  # noqa: E402
from soapwire.receipts import ReceiptRecorder  # noqa: E402


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def runtime_config():
    """Runtime config independent of the environment."""
    return RuntimeConfig(http=HttpConfig(user_agent="soapwire-tests/1.0"))


@pytest.fixture
def envelope():
    return make_envelope()


@pytest.fixture
def mock_transport(envelope):
    """Transport replaying an envelope wrapped in multipart framing."""
    return MockTransport(
        make_noisy_body(envelope),
        headers={"Content-Type": "text/xml; charset=utf-8"},
    )


@pytest.fixture
def recorder():
    return ReceiptRecorder()


@pytest.fixture
def client(mock_transport, runtime_config):
    """SoapHttpClient wired to the mock transport."""
    return SoapHttpClient(mock_transport, config=runtime_config)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep SOAPWIRE_* variables from the developer's shell out of tests."""
    import os
    for name in list(os.environ):
        if name.startswith("SOAPWIRE_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

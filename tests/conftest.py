"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('LOG_LEVEL', 'INFO')

from domain.models import Contact, GatewayResult, PreferredChannel, QueryResult  # noqa: E402
from integrations.salesforce_gateway import ContactGateway  # noqa: E402
from services import cache  # noqa: E402


@pytest.fixture
def contact():
    """Contact used across scenarios: work/personal/alternate set, preferred Personal."""
    return Contact(
        id='003C1',
        work_email='w@x.com',
        personal_email='p@x.com',
        alternate_email='a@x.com',
        preferred_channel=PreferredChannel.PERSONAL,
        opted_out_of_email=True
    )


@pytest.fixture
def gateway():
    """Mock Salesforce gateway; queries return no records, updates succeed."""
    mock_gateway = MagicMock(spec=ContactGateway)
    mock_gateway.query.return_value = GatewayResult.ok(QueryResult())
    mock_gateway.update.return_value = GatewayResult.ok(True)
    return mock_gateway


@pytest.fixture(autouse=True)
def clear_shared_cache():
    """Reset the module-level in-memory cache between tests."""
    cache.clear_memory_cache()
    yield
    cache.clear_memory_cache()

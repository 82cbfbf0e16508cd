import pytest
import os
from unittest.mock import Mock, AsyncMock, patch

from src.config import Config


TEST_ENV = {
    'OAUTH_TOKEN': 'test_token_123',
    'CANVAS_HOST': 'https://test.canvas.edu/',
    'ACCOUNT_ID': '1',
    'AMAZON_S3_BUCKET_URL': 'https://cpn-bucket.s3.amazonaws.com',
    'PAGE_TIMEOUT_MS': '90000',
}


@pytest.fixture(autouse=True)
def mock_env_vars(request):
    """Mock environment variables for testing, live suites keep the real ones."""
    if request.node.get_closest_marker('e2e'):
        yield
        return
    with patch.dict(os.environ, TEST_ENV):
        Config.reload()
        yield
    Config.reload()


@pytest.fixture
def make_response():
    """Build a fake aiohttp response."""
    def _make(status=200, body=None, headers=None):
        response = Mock()
        response.status = status
        response.json = AsyncMock(return_value=body)
        response.headers = headers or {}
        return response
    return _make


@pytest.fixture
def make_session():
    """Build a fake aiohttp session serving ``responses`` in order.

    ``get`` and ``request`` draw from the same queue.
    """
    def _make(*responses):
        session = Mock()
        queue = iter(responses)

        def _next_cm(*args, **kwargs):
            cm = AsyncMock()
            cm.__aenter__ = AsyncMock(return_value=next(queue))
            cm.__aexit__ = AsyncMock(return_value=None)
            return cm

        session.get.side_effect = _next_cm
        session.request.side_effect = _next_cm
        return session
    return _make


@pytest.fixture
def sample_course_data():
    """Sample course data for testing."""
    return {
        "id": 12345,
        "name": "IGNORE: CPN TESTING",
        "course_code": "ignore_cpn_testing",
        "default_view": "modules"
    }


@pytest.fixture
def sample_module_data():
    """Sample module data for testing."""
    return {
        "id": 67890,
        "name": "Module 0",
        "position": 1
    }

"""
Fixtures for the live CPN suites.

These run against a real Canvas instance and a real browser. Required
environment variables (see .env.example):
- OAUTH_TOKEN
- CANVAS_HOST
- ACCOUNT_ID
- AMAZON_S3_BUCKET_URL (general suite only)

Run with: pytest -m e2e
"""

import aiohttp
import pytest
import pytest_asyncio

from src.browser_session import BrowserSession
from src.canvas_client import CanvasClient
from src.config import Config, ConfigurationError, configure_logging
from src.course_fixtures import CourseProvisioner
from src.cpn_injector import CPNInjector


@pytest.fixture(scope="session")
def require_config():
    """Abort the requesting fixture with the name of the missing variable."""
    def _require(*names):
        try:
            Config.require(*names)
        except ConfigurationError as e:
            pytest.fail(str(e), pytrace=False)
        return Config
    return _require


@pytest.fixture(scope="session")
def canvas_config(require_config):
    Config.reload()
    configure_logging()
    return require_config('OAUTH_TOKEN', 'CANVAS_HOST', 'ACCOUNT_ID')


@pytest.fixture(scope="session")
def host(canvas_config) -> str:
    return canvas_config.CANVAS_HOST


@pytest_asyncio.fixture(scope="module", loop_scope="module")
async def http_session(canvas_config):
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture(scope="module")
def canvas_client(canvas_config) -> CanvasClient:
    return CanvasClient()


@pytest.fixture(scope="module")
def provisioner(canvas_config, canvas_client) -> CourseProvisioner:
    return CourseProvisioner(canvas_client, canvas_config.ACCOUNT_ID)


@pytest_asyncio.fixture(scope="module", loop_scope="module")
async def browser(canvas_client):
    async with BrowserSession(canvas_client) as browser_session:
        yield browser_session


@pytest_asyncio.fixture(loop_scope="module")
async def page(browser, http_session):
    """A fresh page, logged in through the session token bridge."""
    page = await browser.new_page()
    try:
        await browser.login(page, http_session)
    except Exception:
        await page.close()
        raise
    yield page
    await page.close()


@pytest.fixture(scope="session")
def injector(canvas_config) -> CPNInjector:
    return CPNInjector()

import pytest
from unittest.mock import Mock, AsyncMock

from src.page_checks import (
    course_url,
    modules_url,
    module_url,
    module_item_url,
    course_id_from_url,
    module_id_from_hash,
    module_item_id_from_url,
    element_exists,
    count_elements,
    read_env,
    title_contains,
    content_contains,
    READ_ENV_SCRIPT
)


HOST = 'https://test.canvas.edu'


class TestUrls:

    def test_builders(self):
        assert course_url(HOST, 1) == 'https://test.canvas.edu/courses/1'
        assert modules_url(HOST, 1) == 'https://test.canvas.edu/courses/1/modules'
        assert module_url(HOST, 1, 22) == 'https://test.canvas.edu/courses/1/modules/22'
        assert module_item_url(HOST, 1, 333) == 'https://test.canvas.edu/courses/1/modules/items/333'

    @pytest.mark.parametrize("url,expected", [
        ('https://test.canvas.edu/courses/12345/modules', 12345),
        ('https://test.canvas.edu/courses/12345', 12345),
        ('https://test.canvas.edu/courses/12345/modules#module_9', 12345),
        ('https://test.canvas.edu/profile', None),
    ])
    def test_course_id_from_url(self, url, expected):
        assert course_id_from_url(url) == expected

    @pytest.mark.parametrize("url,expected", [
        ('https://test.canvas.edu/courses/1/modules#module_67890', 67890),
        ('https://test.canvas.edu/courses/1/modules', None),
        ('https://test.canvas.edu/courses/1/modules#context_module_blank', None),
    ])
    def test_module_id_from_hash(self, url, expected):
        assert module_id_from_hash(url) == expected

    @pytest.mark.parametrize("url,expected", [
        ('https://test.canvas.edu/courses/1/assignments/77?module_item_id=501', 501),
        ('https://test.canvas.edu/courses/1/modules/items/502', None),
        ('https://test.canvas.edu/courses/1/assignments/77?module_item_id=abc', None),
    ])
    def test_module_item_id_from_url(self, url, expected):
        assert module_item_id_from_url(url) == expected


class TestDomReads:

    @pytest.fixture
    def page(self):
        page = Mock()
        page.query_selector = AsyncMock(return_value=None)
        page.query_selector_all = AsyncMock(return_value=[])
        page.evaluate = AsyncMock()
        page.title = AsyncMock(return_value='IGNORE: CPN TESTING')
        page.content = AsyncMock(return_value='<Error><Message>Access Denied</Message></Error>')
        return page

    @pytest.mark.asyncio
    async def test_element_exists(self, page):
        assert not await element_exists(page, '#module_nav')
        page.query_selector.return_value = Mock()
        assert await element_exists(page, '#content')
        page.query_selector.assert_awaited_with('#content')

    @pytest.mark.asyncio
    async def test_count_elements(self, page):
        page.query_selector_all.return_value = [Mock() for _ in range(13)]
        assert await count_elements(page, '.context_module') == 13

    @pytest.mark.asyncio
    async def test_read_env_passes_keys(self, page):
        page.evaluate.return_value = '12345'

        assert await read_env(page, 'COURSE_ID', 'course_id') == '12345'
        page.evaluate.assert_awaited_once_with(READ_ENV_SCRIPT, ['COURSE_ID', 'course_id'])

    @pytest.mark.asyncio
    async def test_title_contains(self, page):
        assert await title_contains(page, 'CPN TESTING')
        assert not await title_contains(page, 'Dashboard')

    @pytest.mark.asyncio
    async def test_content_contains(self, page):
        assert await content_contains(page, '<Message>Access Denied</Message>')

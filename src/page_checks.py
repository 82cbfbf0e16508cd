"""
Canvas page URLs and read-only DOM checks

URL helpers mirror the ways the CPN script works out where it is
(course id from the path, module id from the hash, module item id from
the query string). DOM helpers only read; they never retry or mutate.
"""

import re
from typing import Any, Optional
from urllib.parse import urlparse, parse_qs

from playwright.async_api import Page


_COURSE_ID_PATTERN = re.compile(r'courses/(\d+)')
_MODULE_HASH_PATTERN = re.compile(r'^module_(\d+)$')

READ_ENV_SCRIPT = """(keys) => {
    for (const key of keys) {
        if (ENV[key]) { return ENV[key]; }
    }
    return null;
}"""


def course_url(host: str, course_id: int) -> str:
    return f"{host}/courses/{course_id}"


def modules_url(host: str, course_id: int) -> str:
    return f"{host}/courses/{course_id}/modules"


def module_url(host: str, course_id: int, module_id: int) -> str:
    return f"{host}/courses/{course_id}/modules/{module_id}"


def module_item_url(host: str, course_id: int, item_id: int) -> str:
    return f"{host}/courses/{course_id}/modules/items/{item_id}"


def course_id_from_url(url: str) -> Optional[int]:
    """Return the digits following ``courses/`` in a page URL."""
    match = _COURSE_ID_PATTERN.search(url)
    return int(match.group(1)) if match else None


def module_id_from_hash(url: str) -> Optional[int]:
    """Return the module id from a ``#module_<id>`` fragment."""
    match = _MODULE_HASH_PATTERN.match(urlparse(url).fragment)
    return int(match.group(1)) if match else None


def module_item_id_from_url(url: str) -> Optional[int]:
    """Return the ``module_item_id`` query parameter, if present."""
    values = parse_qs(urlparse(url).query).get('module_item_id')
    if not values or not values[0].isdigit():
        return None
    return int(values[0])


async def element_exists(page: Page, selector: str) -> bool:
    return await page.query_selector(selector) is not None


async def count_elements(page: Page, selector: str) -> int:
    return len(await page.query_selector_all(selector))


async def read_env(page: Page, *keys: str) -> Any:
    """Read the first truthy ``ENV`` global among ``keys``."""
    return await page.evaluate(READ_ENV_SCRIPT, list(keys))


async def title_contains(page: Page, text: str) -> bool:
    return text in await page.title()


async def content_contains(page: Page, text: str) -> bool:
    return text in await page.content()

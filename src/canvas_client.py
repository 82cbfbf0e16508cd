import aiohttp
import logging
import re
from typing import Dict, List, Optional, Any, Mapping, Tuple

from src.config import Config


class CanvasClientError(Exception):
    """Base exception for Canvas client errors."""
    pass


class CanvasAPIError(CanvasClientError):
    """Exception raised for Canvas API errors."""
    def __init__(self, message: str, status_code: int, endpoint: str):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="([^"]+)"')


def parse_link_header(header: Optional[str]) -> Dict[str, str]:
    """Parse a Canvas pagination ``Link`` header.

    Args:
        header: Raw header value, e.g. '<https://.../modules?page=2>; rel="next"'

    Returns:
        Mapping of rel name to URL, empty if the header is missing
    """
    if not header:
        return {}
    return {rel: url for url, rel in _LINK_PATTERN.findall(header)}


def has_next_page(header: Optional[str]) -> bool:
    """Check whether a ``Link`` header announces another page."""
    return 'next' in parse_link_header(header)


class CanvasClient:
    def __init__(self, host: Optional[str] = None, token: Optional[str] = None):
        """Initialize the Canvas API client.

        Args:
            host: Canvas base URL. Defaults to Config.CANVAS_HOST.
            token: Bearer token. Defaults to Config.OAUTH_TOKEN.
        """
        self.host = (host or Config.CANVAS_HOST or '').rstrip('/')
        self.api_token = token or Config.OAUTH_TOKEN
        self.api_url = f"{self.host}/api/v1"
        self.headers = {'Authorization': f'Bearer {self.api_token}'}
        self.logger = logging.getLogger(__name__)

        # Validate configuration
        if not self.host or not self.api_token:
            raise CanvasClientError("Canvas host and token must be configured")

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith('http://') or endpoint.startswith('https://'):
            return endpoint
        return f"{self.api_url}{endpoint}"

    async def _get(self, session: aiohttp.ClientSession, endpoint: str,
                   params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """Make a GET request to the Canvas API.

        Args:
            session: The active client session
            endpoint: The API endpoint to request
            params: Optional query parameters

        Returns:
            The JSON response data if successful, None if 404

        Raises:
            CanvasAPIError: For API errors other than 404
        """
        url = self._build_url(endpoint)
        self.logger.debug(f"Making GET request to: {url}")

        try:
            async with session.get(url, headers=self.headers, params=params) as response:
                if response.status == 200:
                    data = await response.json()
                    self.logger.debug(f"Successfully fetched {endpoint}")
                    return data
                elif response.status == 404:
                    self.logger.info(f"Resource not found: {endpoint}")
                    return None
                else:
                    error_msg = f"Failed to fetch {endpoint}: {response.status}"
                    self.logger.error(error_msg)
                    raise CanvasAPIError(error_msg, response.status, endpoint)
        except aiohttp.ClientError as e:
            error_msg = f"Network error fetching {endpoint}: {str(e)}"
            self.logger.error(error_msg)
            raise CanvasAPIError(error_msg, 0, endpoint)

    async def _request(self, session: aiohttp.ClientSession, method: str, endpoint: str,
                       json: Optional[Dict[str, Any]] = None,
                       data: Optional[Dict[str, Any]] = None,
                       params: Optional[Dict[str, Any]] = None) -> Tuple[Any, Mapping[str, str]]:
        """Make an arbitrary request to Canvas.

        Unlike ``_get`` every non-2xx status is an error, including 404.

        Returns:
            Tuple of (decoded JSON body or None, response headers)

        Raises:
            CanvasAPIError: For any non-2xx status or network failure
        """
        url = self._build_url(endpoint)
        self.logger.debug(f"Making {method} request to: {url}")

        try:
            async with session.request(method, url, headers=self.headers,
                                       json=json, data=data, params=params) as response:
                if 200 <= response.status < 300:
                    body = await response.json(content_type=None)
                    return body, response.headers
                error_msg = f"Failed to {method} {endpoint}: {response.status}"
                self.logger.error(error_msg)
                raise CanvasAPIError(error_msg, response.status, endpoint)
        except aiohttp.ClientError as e:
            error_msg = f"Network error on {method} {endpoint}: {str(e)}"
            self.logger.error(error_msg)
            raise CanvasAPIError(error_msg, 0, endpoint)

    async def create_course(self, session: aiohttp.ClientSession, account_id: Any, name: str,
                            course_code: str, default_view: str = 'modules') -> Dict[str, Any]:
        """Create a course under an account.

        Returns:
            The created course as returned by Canvas
        """
        payload = {'course': {'name': name, 'course_code': course_code, 'default_view': default_view}}
        course, _ = await self._request(session, 'POST', f"/accounts/{account_id}/courses", json=payload)
        return course

    async def update_course(self, session: aiohttp.ClientSession, course_id: int, **fields: Any) -> Dict[str, Any]:
        """Update course attributes, sent form encoded as ``course[field]=value``."""
        form = {f"course[{key}]": value for key, value in fields.items()}
        course, _ = await self._request(session, 'PUT', f"/courses/{course_id}", data=form)
        return course

    async def delete_course(self, session: aiohttp.ClientSession, course_id: int) -> Optional[Dict[str, Any]]:
        """Permanently delete a course."""
        result, _ = await self._request(session, 'DELETE', f"/courses/{course_id}", json={'event': 'delete'})
        return result

    async def create_module(self, session: aiohttp.ClientSession, course_id: int,
                            name: str, position: int) -> Dict[str, Any]:
        payload = {'module': {'name': name, 'position': position}}
        module, _ = await self._request(session, 'POST', f"/courses/{course_id}/modules", json=payload)
        return module

    async def create_assignment(self, session: aiohttp.ClientSession, course_id: int, name: str) -> Dict[str, Any]:
        payload = {'assignment': {'name': name}}
        assignment, _ = await self._request(session, 'POST', f"/courses/{course_id}/assignments", json=payload)
        return assignment

    async def create_module_item(self, session: aiohttp.ClientSession, course_id: int, module_id: int,
                                 module_item: Dict[str, Any]) -> Dict[str, Any]:
        """Attach an item to a module.

        Args:
            session: The active client session
            course_id: The Canvas course ID
            module_id: The Canvas module ID
            module_item: Item attributes, e.g. {'title': ..., 'type': 'ExternalUrl', 'external_url': ...}

        Returns:
            The created module item
        """
        payload = {'module_item': module_item}
        item, _ = await self._request(session, 'POST', f"/courses/{course_id}/modules/{module_id}/items",
                                      json=payload)
        return item

    async def get_modules(self, session: aiohttp.ClientSession, course_id: int,
                          per_page: int = 100) -> List[Dict[str, Any]]:
        """Retrieve a single page of modules for a course.

        Returns:
            A list of module dictionaries, empty if the course is not found
        """
        modules = await self._get(session, f"/courses/{course_id}/modules", params={'per_page': per_page})
        return modules or []

    async def get_modules_link_header(self, session: aiohttp.ClientSession, course_id: int,
                                      per_page: int = 1) -> Optional[str]:
        """Return the raw ``Link`` header of a modules listing, None if absent."""
        _, headers = await self._request(session, 'GET', f"/courses/{course_id}/modules",
                                         params={'per_page': per_page})
        return headers.get('Link')

    async def get_all_modules(self, session: aiohttp.ClientSession, course_id: int,
                              per_page: int = 100) -> List[Dict[str, Any]]:
        """Retrieve every module of a course, following ``rel="next"`` links."""
        modules: List[Dict[str, Any]] = []
        page, headers = await self._request(session, 'GET', f"/courses/{course_id}/modules",
                                            params={'per_page': per_page})
        modules.extend(page or [])

        while has_next_page(headers.get('Link')):
            next_url = parse_link_header(headers.get('Link'))['next']
            page, headers = await self._request(session, 'GET', next_url)
            modules.extend(page or [])

        self.logger.debug(f"Fetched {len(modules)} modules for course {course_id}")
        return modules

    async def get_session_url(self, session: aiohttp.ClientSession) -> str:
        """Exchange the bearer token for a one-time browser session URL."""
        data, _ = await self._request(session, 'GET', f"{self.host}/login/session_token")
        if not data or not data.get('session_url'):
            raise CanvasClientError("Canvas did not return a session_url")
        return data['session_url']

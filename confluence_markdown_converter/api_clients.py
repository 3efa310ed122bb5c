"""Confluence REST client returning pages ready for conversion.

https://developer.atlassian.com/cloud/confluence/rest/v1/intro
"""

import logging
from typing import cast

import requests
from atlassian import Confluence as ConfluenceApiSdk
from requests import RequestException

from confluence_markdown_converter.config import ConfluenceSettings
from confluence_markdown_converter.errors import AccessDeniedError
from confluence_markdown_converter.errors import AuthenticationError
from confluence_markdown_converter.errors import ConfluenceApiError
from confluence_markdown_converter.errors import ConfluenceError
from confluence_markdown_converter.errors import InvalidPageIdError
from confluence_markdown_converter.errors import MissingCredentialsError
from confluence_markdown_converter.errors import PageNotFoundError
from confluence_markdown_converter.models import JsonResponse
from confluence_markdown_converter.models import Page
from confluence_markdown_converter.models import PageRef

logger = logging.getLogger(__name__)

PAGE_EXPAND = "body.storage,version,ancestors,children.page,metadata.labels,space"
CHILD_PAGE_LIMIT = 250


def response_hook(
    response: requests.Response, *args: object, **kwargs: object
) -> requests.Response:
    """Log response headers when requests fail."""
    if not response.ok:
        logger.debug("Request to %s failed with status %s", response.url, response.status_code)
        logger.debug("Response headers: %s", dict(response.headers))
    return response


def error_detail(response: requests.Response) -> str:
    try:
        message = response.json().get("message")
    except (ValueError, AttributeError):
        message = None
    return str(message or response.reason or f"HTTP {response.status_code}")


def error_for_response(response: requests.Response, page_id: str | None = None) -> ConfluenceError:
    status = response.status_code
    detail = error_detail(response)
    if status == 401:  # noqa: PLR2004
        return AuthenticationError(detail)
    if status == 403:  # noqa: PLR2004
        return AccessDeniedError(detail, page_id)
    if status == 404:  # noqa: PLR2004
        return PageNotFoundError(detail, page_id)
    return ConfluenceApiError(detail, status)


def validate_page_id(page_id: str | int) -> str:
    value = str(page_id).strip()
    if not value.isdigit():
        raise InvalidPageIdError(value)
    return value


class ConfluenceClient:
    """Fetch pages and page trees, raising typed errors on failure."""

    def __init__(self, api: ConfluenceApiSdk, site_url: str) -> None:
        self.api = api
        self.site_url = site_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: ConfluenceSettings) -> "ConfluenceClient":
        if missing := settings.missing_credentials():
            raise MissingCredentialsError(missing)

        cloud = settings.type == "cloud"
        url = settings.base_url
        if cloud and not url.endswith("/wiki"):
            url = f"{url}/wiki"

        api = ConfluenceApiSdk(
            url=url,
            username=settings.username,
            password=settings.api_token.get_secret_value(),
            cloud=cloud,
            timeout=settings.timeout,
            **settings.retry_config.model_dump(),
        )
        api.session.hooks["response"] = [response_hook]
        return cls(api, url)

    def _get(
        self, path: str, params: dict[str, object] | None = None, page_id: str | None = None
    ) -> JsonResponse:
        logger.debug("GET %s %s", path, params or "")
        try:
            response = self.api.get(path, params=params, advanced_mode=True)
        except RequestException as e:
            raise ConfluenceApiError(str(e)) from e

        if response.status_code >= 400:  # noqa: PLR2004
            raise error_for_response(response, page_id)
        return cast(JsonResponse, response.json())

    def get_page(self, page_id: str | int) -> Page:
        page_id = validate_page_id(page_id)
        data = self._get(f"rest/api/content/{page_id}", {"expand": PAGE_EXPAND}, page_id)
        page = Page.from_json(data, self.site_url)
        logger.info("Fetched page %s (%s)", page.id, page.title)
        return page

    def get_page_by_title(self, space_key: str, title: str) -> Page | None:
        data = self._get(
            "rest/api/content",
            {"spaceKey": space_key, "title": title, "expand": PAGE_EXPAND},
        )
        results = data.get("results") or []
        if not results:
            return None
        return Page.from_json(results[0], self.site_url)

    def get_child_pages(self, page_id: str | int) -> list[PageRef]:
        page_id = validate_page_id(page_id)
        data = self._get(
            f"rest/api/content/{page_id}/child/page", {"limit": CHILD_PAGE_LIMIT}, page_id
        )
        return PageRef.list_from_json(data.get("results"))

    def get_page_tree(self, page_id: str | int, depth: int = 5) -> list[Page]:
        """Fetch a page and its descendants down to ``depth`` levels, root first."""
        pages: list[Page] = []

        def collect(current_id: str, current_depth: int) -> None:
            page = self.get_page(current_id)
            pages.append(page)
            if current_depth < depth:
                for child in page.children:
                    collect(child.id, current_depth + 1)

        collect(validate_page_id(page_id), 0)
        return pages

    def test_connection(self) -> bool:
        try:
            self._get("rest/api/space", {"limit": 1})
        except ConfluenceError as e:
            logger.warning("Connection test failed: %s", e)
            return False
        return True

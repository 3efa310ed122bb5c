"""Exceptions raised while fetching pages from Confluence."""


class ConfluenceError(Exception):
    """Base exception for all Confluence fetch errors."""


class MissingCredentialsError(ConfluenceError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing credentials: {', '.join(missing)}. Provide them as options or set "
            "CONFLUENCE_BASE_URL, CONFLUENCE_USERNAME and CONFLUENCE_API_TOKEN."
        )
        self.missing = missing


class InvalidPageIdError(ConfluenceError):
    def __init__(self, page_id: str) -> None:
        super().__init__(f"Invalid page ID {page_id!r}. Page IDs are numeric.")
        self.page_id = page_id


class AuthenticationError(ConfluenceError):
    """HTTP 401."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Authentication failed. Check your credentials. ({detail})")
        self.detail = detail


class AccessDeniedError(ConfluenceError):
    """HTTP 403."""

    def __init__(self, detail: str, page_id: str | None = None) -> None:
        target = f" for page {page_id}" if page_id else ""
        super().__init__(f"Access denied{target}. Check permissions. ({detail})")
        self.detail = detail
        self.page_id = page_id


class PageNotFoundError(ConfluenceError):
    """HTTP 404."""

    def __init__(self, detail: str, page_id: str | None = None) -> None:
        if page_id:
            message = f"Page {page_id} not found. Verify the page ID exists."
        else:
            message = f"Resource not found. ({detail})"
        super().__init__(message)
        self.detail = detail
        self.page_id = page_id


class ConfluenceApiError(ConfluenceError):
    """Any other HTTP or transport failure."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        status = f"HTTP {status_code}" if status_code is not None else "no response"
        super().__init__(f"Confluence API error ({status}): {detail}")
        self.detail = detail
        self.status_code = status_code

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import httpx

from fundscope.data_pipeline.errors import FetchError, FundPipelineError
from fundscope.data_pipeline.logging_utils import log_event
from fundscope.data_pipeline.schemas import validate_fund_detail_response, validate_funds_response
from fundscope.data_pipeline.types import FetchResult, FundPage, FundQueryOptions, Pagination
from fundscope.settings import FundscopeSettings

LOGGER = logging.getLogger("fundscope.data_pipeline.fetcher")

DEFAULT_LIMIT = 50
DEFAULT_PAGE = 1
RETRY_BASE_SECONDS = 2.0

REQUEST_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def classify_fetch_error(exc: Exception, status_code: int | None = None) -> str:
    """Map remote fetch exceptions to stable, typed classifications."""
    if status_code == 400:
        return "bad_request"
    if status_code in {401, 403}:
        return "auth_or_blocked"
    if status_code == 404:
        return "endpoint_missing"
    if status_code == 429:
        return "rate_limited"
    if status_code and status_code >= 500:
        return "server_error"
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    if isinstance(exc, httpx.TransportError):
        return "connection_error"
    message = str(exc).lower()
    if "ssl" in message or "certificate" in message:
        return "ssl_cert_issue"
    if "timeout" in message or "timed out" in message:
        return "timeout"
    if "json" in message or "decode" in message or "expecting value" in message:
        return "parse_error"
    return "unknown"


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def build_query_params(options: FundQueryOptions) -> dict[str, str]:
    """Sanitize query options into request parameters.

    Empty values are dropped; a non-positive or non-numeric ``limit`` or
    ``page`` falls back to the defaults instead of being sent as-is.
    """
    raw: dict[str, Any] = {
        "type": options.type,
        "category": options.category,
        "q": options.query,
        "subCategory": options.sub_category,
    }
    params: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            continue
        text = str(value).strip()
        if text:
            params[key] = text

    if options.limit is not None:
        params["limit"] = str(_positive_int(options.limit, DEFAULT_LIMIT))
    if options.page is not None:
        params["page"] = str(_positive_int(options.page, DEFAULT_PAGE))
    return params


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return response.reason_phrase or "Unknown error"


def _http_error(response: httpx.Response, endpoint: str, base_url: str) -> FetchError:
    status = response.status_code
    message = _error_message(response)
    if status == 404:
        text = (
            f"Not Found: the requested resource at {endpoint} was not found. "
            f"Please ensure the backend API is running at {base_url}"
        )
    elif status == 500:
        text = f"Server Error: the backend encountered an error processing the request. {message}"
    elif status == 400:
        text = f"Bad Request (400): {message}. Please check the request parameters. URL: {endpoint}"
    else:
        text = f"API Error ({status}): {message}"
    return FetchError(
        text,
        status_code=status,
        classification=classify_fetch_error(Exception(message), status),
        url=str(response.request.url),
    )


class FundsFetcher:
    """Fetch layer for the funds REST endpoint."""

    def __init__(
        self,
        settings: FundscopeSettings,
        *,
        client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or LOGGER
        self._client = client

    @contextmanager
    def _session(self) -> Iterator[httpx.Client]:
        if self._client is not None:
            yield self._client
            return
        with httpx.Client(
            timeout=self.settings.request_timeout_seconds,
            follow_redirects=True,
            headers=REQUEST_HEADERS,
        ) as client:
            yield client

    def _get_json(self, client: httpx.Client, endpoint: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.settings.api_url}{endpoint}"
        attempts = max(1, self.settings.max_retries)
        for attempt in range(attempts):
            try:
                response = client.get(url, params=params)
                if not response.is_success:
                    raise _http_error(response, endpoint, self.settings.api_url)
                return response.json()
            except FetchError as exc:
                error: FetchError = exc
            except httpx.HTTPError as exc:
                classification = classify_fetch_error(exc)
                if classification in {"connection_error", "timeout"}:
                    text = f"Cannot connect to backend API at {self.settings.api_url}: {exc}"
                else:
                    text = f"Request to {endpoint} failed: {exc}"
                error = FetchError(text, classification=classification, url=url)
                error.__cause__ = exc
            except ValueError as exc:
                error = FetchError(
                    f"Invalid JSON in response from {endpoint}: {exc}",
                    classification="parse_error",
                    url=url,
                )
                error.__cause__ = exc

            retryable = error.classification in {"timeout", "connection_error", "server_error", "rate_limited"}
            if retryable and attempt < attempts - 1:
                wait_seconds = RETRY_BASE_SECONDS ** attempt
                log_event(
                    self.logger,
                    "fetch_retry",
                    logging.WARNING,
                    endpoint=endpoint,
                    attempt=attempt + 1,
                    classification=error.classification,
                    wait_seconds=wait_seconds,
                )
                time.sleep(wait_seconds)
                continue
            raise error
        raise FetchError(f"No attempt made for {endpoint}", url=url)

    def fetch_page(self, options: FundQueryOptions) -> FundPage:
        """Fetch and validate a single ``GET /funds`` page."""
        params = build_query_params(options)
        log_event(self.logger, "fetch_start", params=params)
        with self._session() as client:
            payload = self._get_json(client, "/funds", params)
        items, pagination, message = validate_funds_response(payload)
        log_event(
            self.logger,
            "fetch_complete",
            count=len(items),
            total=pagination.total if pagination else None,
        )
        return FundPage(
            data=items,
            pagination=pagination,
            url=f"{self.settings.funds_endpoint}",
            fetched_at=datetime.now(timezone.utc),
            message=message,
        )

    def fetch_funds(self, options: FundQueryOptions) -> FetchResult:
        """Single bulk fetch; the configured fetch limit applies when *options* has none."""
        if options.limit is None:
            options = replace(options, limit=self.settings.fetch_limit)
        page = self.fetch_page(options)
        return FetchResult(
            raw_funds=page.data,
            pagination=page.pagination,
            pages_fetched=1,
            fetched_at=page.fetched_at,
        )

    def fetch_all(self, options: FundQueryOptions, *, target_count: int | None = None) -> FetchResult:
        """Follow ``hasNext`` across pages until *target_count* funds or the page cap.

        A failing first page raises; a later failing page stops the walk and
        is reported in ``errors``.
        """
        target = target_count or self.settings.fetch_limit
        page_size = self.settings.page_size
        pages_to_fetch = min(-(-target // page_size), self.settings.max_pages)

        raw_funds: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        pagination: Pagination | None = None
        pages_fetched = 0

        for page_number in range(1, pages_to_fetch + 1):
            try:
                page = self.fetch_page(replace(options, page=page_number, limit=page_size))
            except FundPipelineError as exc:
                if page_number == 1:
                    raise
                errors.append(
                    {
                        "page": page_number,
                        "exception_type": type(exc).__name__,
                        "exception_message": str(exc),
                        "classification": getattr(exc, "classification", "schema"),
                    }
                )
                log_event(self.logger, "fetch_page_failed", logging.WARNING, page=page_number, error=str(exc))
                break

            pages_fetched += 1
            raw_funds.extend(page.data)
            pagination = page.pagination
            if len(raw_funds) >= target or pagination is None or not pagination.has_next:
                break

        log_event(self.logger, "fetch_all_complete", pages=pages_fetched, count=len(raw_funds))
        return FetchResult(
            raw_funds=raw_funds,
            pagination=pagination,
            pages_fetched=pages_fetched,
            fetched_at=datetime.now(timezone.utc),
            errors=errors,
        )

    def fetch_fund(self, fund_id: str) -> dict[str, Any]:
        fund_id = str(fund_id or "").strip()
        if not fund_id:
            raise FetchError("fund id is required", classification="bad_request")
        with self._session() as client:
            payload = self._get_json(client, f"/funds/{fund_id}")
        return validate_fund_detail_response(payload)

"""Runtime configuration for the fund data layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .environment import parse_env_bool, parse_env_float, parse_env_int, parse_env_str

DEFAULT_API_URL = "http://localhost:3002/api"
DEFAULT_LIST_STORE = "data/fund_lists.json"


@dataclass(frozen=True)
class FundscopeSettings:
    api_url: str
    request_timeout_seconds: float
    fetch_limit: int
    page_size: int
    max_pages: int
    max_retries: int
    log_level: str
    log_json: bool
    log_file: str | None
    list_store_path: Path

    @property
    def funds_endpoint(self) -> str:
        return f"{self.api_url}/funds"

    @classmethod
    def from_env(cls, *, environ: Mapping[str, str] | None = None) -> "FundscopeSettings":
        api_url = parse_env_str("FUNDSCOPE_API_URL", "", environ=environ)
        if not api_url:
            api_url = parse_env_str("NEXT_PUBLIC_API_URL", DEFAULT_API_URL, environ=environ)

        log_file = parse_env_str("FUNDSCOPE_LOG_FILE", "", environ=environ)
        store_path = parse_env_str("FUNDSCOPE_LIST_STORE", DEFAULT_LIST_STORE, environ=environ)

        return cls(
            api_url=api_url.rstrip("/"),
            request_timeout_seconds=parse_env_float(
                "FUNDSCOPE_REQUEST_TIMEOUT_SECONDS",
                30.0,
                1.0,
                300.0,
                environ=environ,
            ),
            fetch_limit=parse_env_int("FUNDSCOPE_FETCH_LIMIT", 5_000, 1, 20_000, environ=environ),
            page_size=parse_env_int("FUNDSCOPE_PAGE_SIZE", 100, 1, 5_000, environ=environ),
            max_pages=parse_env_int("FUNDSCOPE_MAX_PAGES", 12, 1, 200, environ=environ),
            max_retries=parse_env_int("FUNDSCOPE_MAX_RETRIES", 1, 1, 10, environ=environ),
            log_level=parse_env_str("FUNDSCOPE_LOG_LEVEL", "INFO", environ=environ).upper(),
            log_json=parse_env_bool("FUNDSCOPE_LOG_JSON", False, environ=environ),
            log_file=log_file or None,
            list_store_path=Path(store_path or DEFAULT_LIST_STORE),
        )


def load_settings(*, environ: Mapping[str, str] | None = None) -> FundscopeSettings:
    return FundscopeSettings.from_env(environ=environ)

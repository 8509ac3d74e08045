from __future__ import annotations
from typing import Any, Callable, TypeVar
import httpx
from pydantic import TypeAdapter, ValidationError
import structlog

from cpboard.schemas.admin import SyncResult, UpdateAllResult, ScraperTestResult, TestScrapersRequest
from cpboard.schemas.leaderboard import SolvedRow, ContestRow, SubmissionHistoryResponse

log = structlog.get_logger()

_solved_rows = TypeAdapter(list[SolvedRow])
_contest_rows = TypeAdapter(list[ContestRow])

T = TypeVar("T")


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class LeaderboardClient:
    """Async client for the ``/api/leaderboard`` endpoints used by the dashboard."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "LeaderboardClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kw) -> Any:
        try:
            r = await self._http.request(method, path, **kw)
        except httpx.HTTPError as e:
            log.warning("api_unreachable", path=path, error=str(e))
            raise ApiError(f"Request to {path} failed: {e}") from e
        if r.status_code >= 400:
            try:
                body = r.json()
            except ValueError:
                body = None
            message = (body.get("message") if isinstance(body, dict) else None) or r.text
            log.warning("api_error", path=path, status=r.status_code, message=message)
            raise ApiError(message, status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            log.warning("api_bad_payload", path=path, status=r.status_code)
            raise ApiError(f"Response from {path} is not JSON", status_code=r.status_code) from e

    @staticmethod
    def _parse(path: str, parse: Callable[[Any], T], data: Any) -> T:
        try:
            return parse(data)
        except ValidationError as e:
            log.warning("api_bad_payload", path=path, errors=e.error_count())
            raise ApiError(f"Unexpected response from {path}") from e

    @staticmethod
    def _params(**kw) -> dict[str, Any]:
        return {k: v for k, v in kw.items() if v not in (None, "")}

    async def solved(self, platform: str | None = None) -> list[SolvedRow]:
        data = await self._request("GET", "/solved", params=self._params(platform=platform))
        return self._parse("/solved", _solved_rows.validate_python, data)

    async def contest(self, platform: str | None = None) -> list[ContestRow]:
        data = await self._request("GET", "/contest", params=self._params(platform=platform))
        return self._parse("/contest", _contest_rows.validate_python, data)

    async def submission_history(self, platform: str | None = None, year: int | None = None) -> SubmissionHistoryResponse:
        data = await self._request("GET", "/submissions", params=self._params(platform=platform, year=year))
        return self._parse("/submissions", SubmissionHistoryResponse.model_validate, data)

    async def sync_profiles(self) -> SyncResult:
        return self._parse("/sync", SyncResult.model_validate, await self._request("POST", "/sync"))

    async def update_all(self) -> UpdateAllResult:
        return self._parse("/update-all", UpdateAllResult.model_validate, await self._request("POST", "/update-all"))

    async def test_scrapers(self, payload: TestScrapersRequest) -> ScraperTestResult:
        body = payload.model_dump(by_alias=True, exclude_none=True)
        data = await self._request("POST", "/test-scrapers", json=body)
        return self._parse("/test-scrapers", ScraperTestResult.model_validate, data)

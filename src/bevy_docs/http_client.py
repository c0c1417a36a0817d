from __future__ import annotations

import math
import time
from dataclasses import dataclass

import requests
from requests import exceptions as req_exc

from .urls import BEVY_SCOPE, DocsScope, normalize_url

TRANSIENT_HTTP_STATUSES = {429, 500, 502, 503, 504}
MAX_RETRY_AFTER_S = 60.0


class FetchError(RuntimeError):
    pass


class OutOfScopeError(ValueError):
    pass


def _retry_after_seconds(headers: dict[str, str]) -> float | None:
    retry_after = headers.get("Retry-After")
    if not retry_after:
        return None
    try:
        wait_s = float(retry_after)
    except ValueError:
        return None
    # Server-controlled; only finite delays up to the cap are honored.
    if not math.isfinite(wait_s) or wait_s < 0 or wait_s > MAX_RETRY_AFTER_S:
        return None
    return wait_s


@dataclass(frozen=True)
class FetchResult:
    url: str
    final_url: str
    status_code: int
    headers: dict[str, str]
    fetched_at: float
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return None

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpClient:
    def __init__(
        self,
        session: requests.Session,
        *,
        scope: DocsScope = BEVY_SCOPE,
        timeout_s: int = 30,
        max_retries: int = 2,
        backoff_base_s: float = 1.0,
    ) -> None:
        self._session = session
        self._scope = scope
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._backoff_base_s = backoff_base_s

    @property
    def scope(self) -> DocsScope:
        return self._scope

    def get(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> FetchResult:
        normalized = normalize_url(url)
        if not self._scope.is_allowed(normalized):
            raise OutOfScopeError(f"Refusing to fetch out-of-scope URL: {normalized}")

        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.get(
                    normalized, timeout=self._timeout_s, headers=headers
                )

                if (
                    resp.status_code in TRANSIENT_HTTP_STATUSES
                    and attempt < self._max_retries
                ):
                    retry_after = _retry_after_seconds(dict(resp.headers))
                    wait_s = (
                        retry_after
                        if retry_after is not None
                        else self._backoff_base_s * (2**attempt)
                    )
                    time.sleep(wait_s)
                    continue

                final_url = str(resp.url or normalized)
                # Redirects are followed by requests; the landing page must
                # still be inside the scope.
                if not self._scope.is_allowed(final_url):
                    raise OutOfScopeError(
                        f"Redirected out of scope: {normalized} -> {final_url}"
                    )

                return FetchResult(
                    url=normalized,
                    final_url=final_url,
                    status_code=int(resp.status_code),
                    headers={k: str(v) for k, v in resp.headers.items()},
                    fetched_at=time.time(),
                    body=resp.content,
                )
            except req_exc.RequestException as e:
                last_error = e
                if attempt >= self._max_retries:
                    break
                time.sleep(self._backoff_base_s * (2**attempt))

        raise FetchError(f"Failed to fetch {normalized}: {last_error}")

    def close(self) -> None:
        self._session.close()

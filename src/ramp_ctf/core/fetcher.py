from __future__ import annotations

import asyncio
import logging

import aiohttp
from aiolimiter import AsyncLimiter

from ramp_ctf.core.config import HttpSettings
from ramp_ctf.core.errors import FetchError, ValidationError
from ramp_ctf.core.utils import async_retry_sleep, validate_url


class Fetcher:
    """GET a URL and return its body text, retrying transient failures.

    Bad URLs and empty bodies raise `ValidationError` straight away. Network
    errors, timeouts and non-2xx statuses are retried up to
    `settings.max_retries` attempts in total before `FetchError` is raised.
    """

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        settings: HttpSettings,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._log = logger if logger is not None else logging.getLogger(__name__)
        # aiolimiter can't hand out a fractional token, so slow rates stretch the period.
        rps = max(0.1, float(settings.requests_per_second))
        if rps >= 1.0:
            self._limiter = AsyncLimiter(max_rate=rps, time_period=1.0)
        else:
            self._limiter = AsyncLimiter(max_rate=1.0, time_period=1.0 / rps)

    @property
    def max_attempts(self) -> int:
        return max(1, int(self._settings.max_retries))

    async def fetch(self, url: str) -> str:
        validate_url(url)

        attempts = 0
        last_exc: Exception | None = None
        last_status: int | None = None

        while attempts < self.max_attempts:
            attempts += 1
            self._log.info("Fetching URL: %s (attempt %d/%d)", url, attempts, self.max_attempts)
            try:
                async with self._limiter:
                    body = await self._fetch_once(url)
            except aiohttp.InvalidURL as e:
                raise ValidationError(f"Invalid URL provided: {url!r}", value=url) from e
            except aiohttp.ClientResponseError as e:
                last_exc = e
                last_status = e.status
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exc = e
            else:
                if not body.strip():
                    raise ValidationError(f"Empty response body from {url}", value=url)
                self._log.info("Fetched %d characters from %s", len(body), url)
                return body

            self._log.warning("Fetch attempt %d/%d failed for %s: %s", attempts, self.max_attempts, url, _describe(last_exc))
            if attempts < self.max_attempts:
                await async_retry_sleep(attempts, self._settings.retry_delay_seconds)

        raise FetchError(
            url,
            f"Failed to fetch URL after {attempts} attempts: {_describe(last_exc)}",
            attempts=attempts,
            status=last_status,
        ) from last_exc

    async def _fetch_once(self, url: str) -> str:
        headers = {
            "User-Agent": self._settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8",
        }
        timeout = aiohttp.ClientTimeout(total=self._settings.timeout_seconds)
        async with self._session.get(url, headers=headers, timeout=timeout, allow_redirects=True) as resp:
            if not 200 <= resp.status < 300:
                raise aiohttp.ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=resp.reason or "",
                    headers=resp.headers,
                )
            return await resp.text(errors="ignore")


def _describe(exc: BaseException | None) -> str:
    if exc is None:
        return "unknown error"
    return str(exc) or type(exc).__name__

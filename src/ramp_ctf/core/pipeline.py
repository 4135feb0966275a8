from __future__ import annotations

import logging

import aiohttp

from ramp_ctf.core.config import AppConfig
from ramp_ctf.core.errors import FetchError, ValidationError
from ramp_ctf.core.fetcher import Fetcher
from ramp_ctf.core.models import ExtractionResult
from ramp_ctf.core.orchestrator import ExtractionOrchestrator
from ramp_ctf.core.strategies import build_default_strategies
from ramp_ctf.core.utils import is_absolute_url, strip_markup

logger = logging.getLogger(__name__)

_RULE = "=" * 60


class UrlExtractor:
    """Fetch the challenge page, decode the hidden URL and fetch the flag behind it."""

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        orchestrator: ExtractionOrchestrator,
        logger: logging.Logger | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._log = logger if logger is not None else logging.getLogger(__name__)

    async def run(self, challenge_url: str) -> ExtractionResult:
        self._log.info(_RULE)
        self._log.info("Starting URL extraction process...")
        self._log.info(_RULE)

        self._log.info("Step 1: Fetching HTML...")
        html = await self._fetcher.fetch(challenge_url)
        self._log.info("HTML fetched: %d characters", len(html))

        self._log.info("Step 2: Extracting characters...")
        characters = self._orchestrator.parse(html)
        self._log.info("Extracted %d characters", len(characters))

        self._log.info("Step 3: Building URL...")
        url = self.build_url(characters)

        self._log.info("Step 4: Fetching flag...")
        flag = await self._fetch_flag(url)

        result = ExtractionResult(
            url=url,
            flag=flag,
            characters=list(characters),
            character_count=len(characters),
        )
        self._report(result)
        return result

    def build_url(self, characters: list[str]) -> str:
        url = "".join(characters)
        if is_absolute_url(url):
            self._log.info("URL built: %s", url)
        else:
            self._log.warning("Built string may not be a valid URL: %s", url)
        return url

    async def _fetch_flag(self, url: str) -> str | None:
        try:
            body = await self._fetcher.fetch(url)
        except (FetchError, ValidationError) as e:
            self._log.warning("Could not fetch flag automatically: %s", e)
            self._log.info("Please open the URL manually in your browser to get the flag")
            return None
        flag = strip_markup(body)
        self._log.info("Flag retrieved: %s", flag)
        return flag

    def _report(self, result: ExtractionResult) -> None:
        self._log.info(_RULE)
        self._log.info("EXTRACTION COMPLETE")
        self._log.info(_RULE)
        self._log.info("Hidden URL: %s", result.url)
        if result.flag:
            self._log.info("Flag: %s", result.flag)
        self._log.info("Total characters: %d", result.character_count)
        self._log.info(_RULE)


class RampCtfSolver:
    def __init__(self, *, config: AppConfig, session: aiohttp.ClientSession, logger: logging.Logger | None = None) -> None:
        self._config = config
        fetcher = Fetcher(session=session, settings=config.http, logger=logger)
        orchestrator = ExtractionOrchestrator(build_default_strategies(config.pattern, logger=logger), logger=logger)
        self.extractor = UrlExtractor(fetcher=fetcher, orchestrator=orchestrator, logger=logger)

    async def run(self) -> ExtractionResult:
        return await self.extractor.run(self._config.challenge_url)


async def solve(config: AppConfig) -> ExtractionResult:
    async with aiohttp.ClientSession() as session:
        solver = RampCtfSolver(config=config, session=session)
        result = await solver.run()
    logger.info("Challenge completed successfully")
    return result

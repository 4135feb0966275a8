from __future__ import annotations

import logging
from typing import Iterable

from ramp_ctf.core.errors import AllStrategiesFailedError, ExtractionError, ValidationError
from ramp_ctf.core.models import StrategyReport
from ramp_ctf.core.strategies import ExtractionStrategy
from ramp_ctf.core.utils import validate_characters, validate_document


class ExtractionOrchestrator:
    """Try extraction strategies in priority order; the first non-empty result wins.

    Results are never merged: once a strategy returns characters, the ones
    after it are not invoked.
    """

    def __init__(
        self,
        strategies: Iterable[ExtractionStrategy] = (),
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._strategies: list[ExtractionStrategy] = list(strategies)
        self._log = logger if logger is not None else logging.getLogger(__name__)

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def add_strategy(self, strategy: ExtractionStrategy) -> None:
        self._strategies.append(strategy)
        self._log.debug("Added strategy: %s", strategy.name)

    def parse(self, document: str) -> list[str]:
        validate_document(document)
        self._log.info("Starting HTML parsing with %d strategies...", len(self._strategies))

        failures: list[tuple[str, str]] = []
        for strategy in self._strategies:
            self._log.info("Trying %s...", strategy.name)
            try:
                characters = strategy.extract(document)
            except ExtractionError as e:
                failures.append((strategy.name, str(e)))
                self._log.warning("Strategy error: %s", e)
                continue

            if not characters:
                failures.append((strategy.name, "no matching elements"))
                self._log.warning("%s found no matching elements", strategy.name)
                continue

            try:
                characters = validate_characters(characters)
            except ValidationError as e:
                failures.append((strategy.name, str(e)))
                self._log.warning("%s returned an unusable result: %s", strategy.name, e)
                continue

            self._log.info("Successfully extracted %d characters using %s", len(characters), strategy.name)
            return characters

        err = AllStrategiesFailedError(failures)
        self._log.error("HTML parsing failed: %s", err)
        raise err

    def compare(self, document: str) -> list[StrategyReport]:
        """Run every strategy, without stopping at the first success.

        Diagnostic only; `parse` is what the pipeline uses.
        """

        validate_document(document)
        reports: list[StrategyReport] = []
        for strategy in self._strategies:
            try:
                characters = list(strategy.extract(document))
            except ExtractionError as e:
                reports.append(StrategyReport(strategy=strategy.name, characters=[], error=str(e)))
                continue
            reports.append(StrategyReport(strategy=strategy.name, characters=characters))
        return reports

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path


CHALLENGE_URL = "https://tns4lpgmziiypnxxzel5ss5nyu0nftol.lambda-url.us-east-1.on.aws/challenge"

# Ordered from least to most verbose.
LOG_LEVELS: dict[str, int] = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class PatternSettings:
    """Attribute values of the nested section > article > div > b shape.

    The first three are substring matches, `b_class` must match exactly.
    """

    section_data_id: str = "92"
    article_data_class: str = "45"
    div_data_tag: str = "78"
    b_class: str = "ref"
    value_attribute: str = "value"


@dataclass(frozen=True)
class HttpSettings:
    timeout_seconds: float = 10.0
    # Total attempts per URL, the first one included.
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    requests_per_second: float = 5.0
    user_agent: str = "ramp-ctf-solver/1.0 (+aiohttp)"


@dataclass(frozen=True)
class AppConfig:
    challenge_url: str = CHALLENGE_URL
    pattern: PatternSettings = field(default_factory=PatternSettings)
    http: HttpSettings = field(default_factory=HttpSettings)
    log_level: str = DEFAULT_LOG_LEVEL
    log_path: Path | None = None

    @classmethod
    def load(cls, *, debug: bool = False) -> "AppConfig":
        cfg = cls()
        if debug:
            cfg = replace(cfg, log_level="DEBUG")
        return cfg

    @property
    def logging_level(self) -> int:
        return LOG_LEVELS.get(self.log_level.upper(), LOG_LEVELS[DEFAULT_LOG_LEVEL])

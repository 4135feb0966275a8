from __future__ import annotations

import asyncio
import random
import re
from typing import Any

from yarl import URL

from ramp_ctf.core.errors import ValidationError


_TAG_RE = re.compile(r"<[^>]*>")


def is_absolute_url(url: str) -> bool:
    if not isinstance(url, str) or not url.strip():
        return False
    # Whitespace and control characters never survive the request line.
    if any(ch.isspace() or ord(ch) < 0x20 for ch in url):
        return False
    try:
        parsed = URL(url)
        host = parsed.host
    except (ValueError, TypeError):
        return False
    return parsed.scheme.lower() in {"http", "https"} and bool(host)


def validate_url(url: str) -> str:
    if not is_absolute_url(url):
        raise ValidationError(f"Invalid URL provided: {url!r}", value=url)
    return url


def validate_document(text: Any) -> str:
    if not isinstance(text, str) or not text:
        raise ValidationError("HTML content is empty or invalid", value=text)
    if not text.strip():
        raise ValidationError("HTML content is empty", value=text)
    return text


def validate_characters(characters: Any) -> list[str]:
    if not isinstance(characters, (list, tuple)):
        raise ValidationError("Extracted characters must be a list", value=characters)
    if not characters:
        raise ValidationError("No characters were extracted from the HTML", value=characters)
    return list(characters)


def strip_markup(text: str) -> str:
    return _TAG_RE.sub("", text).strip()


async def async_retry_sleep(attempt: int, base_seconds: float) -> None:
    if base_seconds <= 0:
        return
    delay = base_seconds * (2 ** max(0, attempt - 1))
    delay *= random.uniform(0.85, 1.15)
    await asyncio.sleep(min(delay, 30.0))

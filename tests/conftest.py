from __future__ import annotations

import pytest

from ramp_ctf.core.config import HttpSettings


def make_structure(value: str | None, *, data_id: str = "x92y", data_class: str = "a45b", data_tag: str = "c78d", b_class: str = "ref") -> str:
    value_attr = "" if value is None else f' value="{value}"'
    return (
        f'<section data-id="{data_id}">'
        f'<article data-class="{data_class}">'
        f'<div data-tag="{data_tag}">'
        f'<b class="{b_class}"{value_attr}></b>'
        "</div></article></section>"
    )


def make_page(*structures: str) -> str:
    body = "\n".join(structures)
    return f"<!doctype html><html><head><title>Challenge</title></head><body>\n{body}\n</body></html>"


@pytest.fixture()
def http_settings() -> HttpSettings:
    return HttpSettings(timeout_seconds=2.0, max_retries=3, retry_delay_seconds=0.0, requests_per_second=100.0)


@pytest.fixture()
def abc_page() -> str:
    return make_page(make_structure("a"), make_structure("b"), make_structure("c"))

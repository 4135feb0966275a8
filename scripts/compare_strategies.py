from __future__ import annotations

import sys
from pathlib import Path

from ramp_ctf.core.config import AppConfig
from ramp_ctf.core.orchestrator import ExtractionOrchestrator
from ramp_ctf.core.strategies import build_default_strategies


def main() -> int:
    if len(sys.argv) != 2:
        print("usage: compare_strategies.py <saved-page.html>", file=sys.stderr)
        return 2

    path = Path(sys.argv[1])
    html = path.read_text(encoding="utf-8", errors="ignore")
    cfg = AppConfig.load()
    print("file:", path, f"({len(html)} chars)")

    orchestrator = ExtractionOrchestrator(build_default_strategies(cfg.pattern))
    for report in orchestrator.compare(html):
        if report.error:
            print(f"{report.strategy}: ERROR {report.error}")
            continue
        print(f"{report.strategy}: {len(report.characters)} characters")
        print("  joined:", "".join(report.characters))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

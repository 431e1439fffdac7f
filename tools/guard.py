from __future__ import annotations

from collections.abc import Callable

from functionable.config import Settings
from functionable.logging import get_logger, setup_logging
from tools.guards import declaration_guard, hygiene_guard

Runner = Callable[[list[str]], int]

logger = get_logger(__name__)


def run_guards(roots: list[str]) -> int:
    runners: list[tuple[str, Runner]] = [
        ("hygiene", hygiene_guard.run),
        ("declaration", declaration_guard.run),
    ]
    for name, runner in runners:
        rc = runner(roots)
        if rc != 0:
            logger.error("Guard %s reported violations", name)
            return rc
    return 0


def main() -> int:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    return run_guards(list(settings.guard_roots))


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import os
from dataclasses import dataclass

_DEFAULT_GUARD_ROOTS = ("functionable", "tests", "tools")


@dataclass(frozen=True)
class Settings:
    """Tooling settings loaded from the environment, framework-free."""

    log_level: str
    guard_roots: tuple[str, ...]

    @staticmethod
    def from_env() -> Settings:
        prefix = "FUNCTIONABLE_"
        log_level = os.getenv(f"{prefix}LOG_LEVEL", "INFO").strip().upper() or "INFO"
        raw_roots = os.getenv(f"{prefix}GUARD_ROOTS", "")
        roots = tuple(root.strip() for root in raw_roots.split(",") if root.strip())
        return Settings(log_level=log_level, guard_roots=roots or _DEFAULT_GUARD_ROOTS)

from __future__ import annotations

import ast
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path


def iter_python_files(roots: Iterable[str]) -> Iterator[Path]:
    for root in roots:
        base = Path(root)
        if base.is_file() and base.suffix == ".py":
            yield base
        elif base.exists():
            yield from sorted(base.rglob("*.py"))


def parse(path: Path) -> tuple[str, ast.Module]:
    try:
        text = path.read_text(encoding="utf-8")
        tree = ast.parse(text, filename=str(path))
    except Exception as exc:  # pragma: no cover - guard must not crash silently
        sys.stderr.write(f"{path}: PARSE_ERROR {exc}\n")
        raise
    return text, tree


def report(errors: list[str]) -> int:
    if errors:
        sys.stderr.write("\n".join(errors) + "\n")
        return 1
    return 0

from __future__ import annotations

import ast
import sys
import tokenize
from io import StringIO
from pathlib import Path

from tools.guards.common import iter_python_files, parse, report

FORBIDDEN_TYPING = frozenset({"Any", "cast"})


class _HygieneVisitor(ast.NodeVisitor):
    def __init__(self, path: Path) -> None:
        self.path = path
        self.errors: list[str] = []

    def _flag(self, lineno: int, message: str) -> None:
        self.errors.append(f"{self.path}:{lineno} {message}")

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self._flag(node.lineno, "bare 'except' is forbidden")
        if not any(isinstance(child, ast.Raise) for child in ast.walk(node)):
            self._flag(node.lineno, "except without re-raise is forbidden")
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:
        if isinstance(node.func, ast.Name):
            if node.func.id == "print":
                self._flag(node.lineno, "use logger; 'print' is forbidden")
            elif node.func.id == "cast":
                self._flag(node.lineno, "forbidden use of cast()")
        self.generic_visit(node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.module == "typing":
            for alias in node.names:
                if alias.name in FORBIDDEN_TYPING:
                    self._flag(node.lineno, f"forbidden typing import '{alias.name}'")

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if (
            isinstance(node.value, ast.Name)
            and node.value.id == "typing"
            and node.attr in FORBIDDEN_TYPING
        ):
            self._flag(node.lineno, f"forbidden use of typing.{node.attr}")
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if node.id == "Any":
            self._flag(node.lineno, "forbidden type 'Any'")


def check_path(path: Path) -> list[str]:
    text, tree = parse(path)
    visitor = _HygieneVisitor(path)
    visitor.visit(tree)

    # Tokenize so that string literals mentioning the marker are not flagged
    visitor.errors.extend(
        f"{path}:{tok.start[0]} forbidden 'type: ignore'"
        for tok in tokenize.generate_tokens(StringIO(text).readline)
        if tok.type == tokenize.COMMENT and "type: ignore" in tok.string
    )
    return visitor.errors


def run(roots: list[str]) -> int:
    errors: list[str] = []
    for path in iter_python_files(roots):
        errors.extend(check_path(path))
    return report(errors)


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())

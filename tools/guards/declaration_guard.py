"""Static check for guarded namespaces.

Flags, inside classes declared with ``metaclass=Functionable``, members
decorated as static or class methods and calls to operations the policy
disables. Both already fail at import time; this reports them without
importing anything.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

from functionable.types import DISABLED_METHODS, HOOK_NAMES
from tools.guards.common import iter_python_files, parse, report

POLICY_NAME = "Functionable"
STATIC_DECORATORS = frozenset({"staticmethod", "classmethod"})


def _terminal_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def is_guarded(node: ast.ClassDef) -> bool:
    return any(
        keyword.arg == "metaclass" and _terminal_name(keyword.value) == POLICY_NAME
        for keyword in node.keywords
    )


def _static_members(path: Path, node: ast.ClassDef) -> list[str]:
    errors: list[str] = []
    for member in node.body:
        if not isinstance(member, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        if member.name in HOOK_NAMES:
            continue
        if any(_terminal_name(d) in STATIC_DECORATORS for d in member.decorator_list):
            errors.append(
                f"{path}:{member.lineno} avoid defining '{member.name}' as a class "
                f"method in guarded namespace '{node.name}'"
            )
    return errors


def check_tree(path: Path, tree: ast.Module) -> list[str]:
    errors: list[str] = []
    guarded: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.ClassDef) and is_guarded(node):
            guarded.add(node.name)
            errors.extend(_static_members(path, node))

    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and isinstance(node.func.value, ast.Name)
            and node.func.value.id in guarded
            and node.func.attr in DISABLED_METHODS
        ):
            errors.append(
                f"{path}:{node.lineno} '{node.func.value.id}.{node.func.attr}' "
                "is disabled on guarded namespaces"
            )
    return errors


def run(roots: list[str]) -> int:
    errors: list[str] = []
    for path in iter_python_files(roots):
        # Test modules exercise the rejections on purpose.
        if path.name.startswith("test_"):
            continue
        _, tree = parse(path)
        errors.extend(check_tree(path, tree))
    return report(errors)


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

from pathlib import Path

import pytest
from tools import guard
from tools.guards import declaration_guard, hygiene_guard

_DIRTY = (
    "import typing\n"
    "from typing import Any\n"
    "\n"
    "\n"
    "def show(value: Any) -> None:\n"
    "    try:\n"
    "        print(value)\n"
    "    except:\n"
    "        pass\n"
    "\n"
    "\n"
    "x = typing.cast(int, 1)  # type: ignore\n"
)

_GUARDED = (
    "from functionable.policy import Functionable\n"
    "\n"
    "\n"
    "class Slug(metaclass=Functionable):\n"
    "    @staticmethod\n"
    "    def make(text):\n"
    "        return text\n"
    "\n"
    "    @classmethod\n"
    "    def method_added(cls, name):\n"
    "        pass\n"
    "\n"
    "\n"
    "Slug.alias_method('build', 'make')\n"
    "Slug.conceal('make')\n"
)


def test_hygiene_guard_flags_each_violation(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "dirty.py").write_text(_DIRTY, encoding="utf-8")

    rc = hygiene_guard.run([str(tmp_path)])
    err = capsys.readouterr().err

    assert rc == 1
    assert "forbidden typing import 'Any'" in err
    assert "forbidden type 'Any'" in err
    assert "use logger; 'print' is forbidden" in err
    assert "bare 'except' is forbidden" in err
    assert "except without re-raise is forbidden" in err
    assert "forbidden use of typing.cast" in err
    assert "forbidden 'type: ignore'" in err


def test_hygiene_guard_allows_clean_file(tmp_path: Path) -> None:
    (tmp_path / "clean.py").write_text(
        "def f() -> None:\n"
        "    try:\n"
        "        pass\n"
        "    except ValueError:\n"
        "        raise\n"
        "\n"
        "\n"
        "NOTE = 'type: ignore in a string is fine'\n",
        encoding="utf-8",
    )

    assert hygiene_guard.run([str(tmp_path)]) == 0


def test_declaration_guard_flags_static_members_and_disabled_calls(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "slug.py").write_text(_GUARDED, encoding="utf-8")

    rc = declaration_guard.run([str(tmp_path)])
    err = capsys.readouterr().err

    assert rc == 1
    assert "avoid defining 'make' as a class method in guarded namespace 'Slug'" in err
    assert "method_added" not in err
    assert "'Slug.alias_method' is disabled" in err
    assert "Slug.conceal" not in err


def test_declaration_guard_skips_test_modules(tmp_path: Path) -> None:
    (tmp_path / "test_slug.py").write_text(_GUARDED, encoding="utf-8")

    assert declaration_guard.run([str(tmp_path)]) == 0


def test_declaration_guard_ignores_ungoverned_classes(tmp_path: Path) -> None:
    (tmp_path / "plain.py").write_text(
        "class Plain:\n"
        "    @staticmethod\n"
        "    def make():\n"
        "        return 1\n",
        encoding="utf-8",
    )

    assert declaration_guard.run([str(tmp_path)]) == 0


def test_run_guards_stops_at_first_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "dirty.py").write_text(_DIRTY, encoding="utf-8")

    assert guard.run_guards([str(tmp_path)]) == 1
    assert "bare 'except'" in capsys.readouterr().err


def test_main_reads_roots_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "clean.py").write_text("x = 1\n", encoding="utf-8")
    monkeypatch.setenv("FUNCTIONABLE_GUARD_ROOTS", str(tmp_path))

    assert guard.main() == 0


def test_missing_roots_are_skipped() -> None:
    assert guard.run_guards(["does-not-exist"]) == 0

from __future__ import annotations

from typing import Final, Literal

Operation = Literal[
    "extend",
    "include",
    "prepend",
    "module_function",
    "public",
    "protected",
    "private",
    "alias_method",
    "class_variable_set",
    "class_variable_get",
    "const_set",
    "define_method",
    "remove_method",
    "undef_method",
    "singleton_method_added",
]

# Operations a guarded namespace rejects when called explicitly.
DISABLED_METHODS: Final[frozenset[str]] = frozenset(
    {
        "module_function",
        "public",
        "protected",
        "private",
        "alias_method",
        "class_variable_set",
        "class_variable_get",
        "const_set",
        "define_method",
        "remove_method",
        "undef_method",
        "define_singleton_method",
    }
)

HOOK_NAMES: Final[frozenset[str]] = frozenset(
    {"method_added", "singleton_method_added"}
)

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from types import FunctionType
from typing import NoReturn
from weakref import WeakKeyDictionary

from functionable.errors import DisabledOperationError
from functionable.logging import get_logger
from functionable.namespace import Namespace
from functionable.types import HOOK_NAMES, Operation

logger = get_logger(__name__)


@dataclass
class PromotionState:
    """Transaction flag of one guarded namespace and the lock serializing it."""

    promoting: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock)


_STATES: WeakKeyDictionary[type, PromotionState] = WeakKeyDictionary()
_STATES_LOCK = threading.Lock()


def _state(namespace: type) -> PromotionState:
    with _STATES_LOCK:
        state = _STATES.get(namespace)
        if state is None:
            state = _STATES[namespace] = PromotionState()
        return state


def _disabled(cls: type, operation: Operation, message: str) -> DisabledOperationError:
    logger.debug(
        "Rejected disabled operation",
        extra={"namespace": cls.__qualname__, "operation": operation},
    )
    return DisabledOperationError(message, operation=operation)


def _check_singleton_declaration(cls: type, name: str) -> None:
    state = _state(cls)
    with state.lock:
        if name in HOOK_NAMES or state.promoting:
            return
    raise _disabled(
        cls,
        "singleton_method_added",
        f"Avoid defining {name!r} as a class method because the method will be "
        "automatically converted to a class method for you.",
    )


def _concealment_list(names: Iterable[str | Iterable[str]]) -> list[str]:
    flat: list[str] = []
    for entry in names:
        if isinstance(entry, str):
            flat.append(entry)
        else:
            flat.extend(entry)
    return flat


class _PolicyDefinition(type):
    """Metaclass of `Functionable`; merging the policy itself is always refused."""

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, object],
        **kwargs: object,
    ) -> _PolicyDefinition:
        cls = super().__new__(mcs, name, bases, namespace, **kwargs)
        for base in bases:
            if isinstance(base, _PolicyDefinition):
                type(base).included(base, cls)
        return cls

    def extended(cls, target: type) -> NoReturn:
        # A class cannot swap its metaclass once created.
        raise _disabled(
            cls,
            "extend",
            "Module extend is disabled, use metaclass=Functionable instead.",
        )

    def included(cls, target: type) -> NoReturn:
        raise _disabled(
            cls, "include", "Module include is disabled, use extend instead."
        )

    def prepended(cls, target: type) -> NoReturn:
        raise _disabled(
            cls, "prepend", "Module prepend is disabled, use extend instead."
        )


class Functionable(Namespace, metaclass=_PolicyDefinition):
    """Metaclass for guarded namespaces of functions.

    Every function declared in the class body, or later through the host
    operations, is promoted to a static member::

        class Slug(metaclass=Functionable):
            def make(text):
                return text.lower().replace(" ", "-")

        Slug.make("A Title")  # "a-title"

    Declaring static or class methods directly, changing visibility,
    aliasing, touching shared state and removing members are rejected with
    `DisabledOperationError`. `conceal` is the one way to hide members.
    """

    @property
    def promoting(cls) -> bool:
        """True only while a promotion of this namespace is in flight."""
        return _state(cls).promoting

    # Attachment

    def extended(cls, target: type) -> NoReturn:
        raise _disabled(cls, "extend", "Module extend is disabled.")

    def included(cls, target: type) -> NoReturn:
        raise _disabled(cls, "include", "Module include is disabled.")

    def prepended(cls, target: type) -> NoReturn:
        raise _disabled(cls, "prepend", "Module prepend is disabled.")

    # Promotion

    def method_added(cls, name: str) -> None:
        state = _state(cls)
        with state.lock:
            try:
                function = type(cls).instance_method(cls, name)
                state.promoting = True
                type(cls).remove_method(cls, name)
                type(cls).define_singleton_method(cls, name, function)
            finally:
                state.promoting = False
        logger.debug(
            "Promoted member", extra={"namespace": cls.__qualname__, "member": name}
        )
        super().method_added(name)

    def singleton_method_added(cls, name: str) -> None:
        _check_singleton_declaration(cls, name)
        super().singleton_method_added(name)

    def define_singleton_method(cls, name: str, function: FunctionType) -> None:
        # Checked before writing so a rejection never touches an existing member.
        _check_singleton_declaration(cls, name)
        super().define_singleton_method(name, function)

    def remove_method(cls, name: str) -> None:
        state = _state(cls)
        with state.lock:
            if state.promoting:
                super().remove_method(name)
                return
        raise _disabled(cls, "remove_method", f"Removing method {name!r} is disabled.")

    # Visibility

    def module_function(cls, *names: str) -> NoReturn:
        raise _disabled(cls, "module_function", "Module function behavior is disabled.")

    def public(cls, *names: str) -> NoReturn:
        raise _disabled(cls, "public", "Public visibility is disabled.")

    def protected(cls, *names: str) -> NoReturn:
        raise _disabled(cls, "protected", "Protected visibility is disabled.")

    def private(cls, *names: str) -> NoReturn:
        raise _disabled(
            cls, "private", "Private visibility is disabled, use conceal instead."
        )

    def conceal(cls, *names: str | Iterable[str]) -> None:
        """Hide static members from callers outside this namespace.

        Accepts ``conceal("a")``, ``conceal("a", "b")`` or ``conceal(["a", "b"])``.
        """
        type(cls).private_class_method(cls, *_concealment_list(names))

    # Mutation

    def alias_method(cls, new_name: str, old_name: str) -> NoReturn:
        raise _disabled(
            cls, "alias_method", f"Aliasing {old_name!r} as {new_name!r} is disabled."
        )

    def class_variable_set(cls, name: str, value: object) -> NoReturn:
        raise _disabled(
            cls, "class_variable_set", f"Setting class variable {name!r} is disabled."
        )

    def class_variable_get(cls, name: str) -> NoReturn:
        raise _disabled(
            cls, "class_variable_get", f"Getting class variable {name!r} is disabled."
        )

    def const_set(cls, name: str, value: object) -> NoReturn:
        raise _disabled(cls, "const_set", f"Setting constant {name!r} is disabled.")

    def define_method(cls, name: str, function: FunctionType) -> NoReturn:
        raise _disabled(cls, "define_method", f"Defining method {name!r} is disabled.")

    def undef_method(cls, name: str) -> NoReturn:
        raise _disabled(
            cls, "undef_method", f"Undefining method {name!r} is disabled."
        )

    # Native syntax routes through the operations above.

    def __setattr__(cls, name: str, value: object) -> None:
        if name.startswith("__") and name.endswith("__"):
            super().__setattr__(name, value)
        elif isinstance(value, (staticmethod, classmethod)):
            _check_singleton_declaration(cls, name)
            super().__setattr__(name, value)
        elif isinstance(value, FunctionType):
            type(cls).define_method(cls, name, value)
        elif name[:1].isupper():
            type(cls).const_set(cls, name, value)
        else:
            type(cls).class_variable_set(cls, name, value)

    def __delattr__(cls, name: str) -> None:
        if name.startswith("__") and name.endswith("__"):
            super().__delattr__(name)
            return
        type(cls).remove_method(cls, name)

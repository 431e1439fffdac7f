from __future__ import annotations

import inspect
import sys
from collections.abc import Iterator, Mapping
from types import CodeType, FrameType, FunctionType

from functionable.errors import ConcealedMemberError
from functionable.logging import get_logger

logger = get_logger(__name__)

_CONCEALED = "__concealed__"
_MISSING = object()


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def instance_functions(source: type) -> dict[str, FunctionType]:
    """Plain functions declared directly on `source`, in declaration order."""
    return {
        name: value
        for name, value in vars(source).items()
        if isinstance(value, FunctionType) and not _is_dunder(name)
    }


def _member_functions(members: Mapping[str, object]) -> Iterator[FunctionType]:
    for value in members.values():
        if isinstance(value, (staticmethod, classmethod)):
            value = value.__func__
        if isinstance(value, FunctionType):
            yield value


def _code_objects(code: CodeType) -> Iterator[CodeType]:
    """`code` and every scope nested in it (lambdas, comprehensions, inner defs)."""
    yield code
    for const in code.co_consts:
        if isinstance(const, CodeType):
            yield from _code_objects(const)


def _called_from_member(cls: type, frame: FrameType) -> bool:
    """Whether `frame` runs code declared on `cls` or one of its ancestors."""
    for klass in type.__getattribute__(cls, "__mro__"):
        for function in _member_functions(vars(klass)):
            if any(code is frame.f_code for code in _code_objects(function.__code__)):
                return True
    return False


def _notify(source: object, hook: str, target: type) -> None:
    # Hooks live on the metaclass, so a member named like a hook never shadows one.
    callback = getattr(type(source), hook, None)
    if callback is not None:
        callback(source, target)


def _announce(cls: Namespace, name: str, value: object) -> None:
    if isinstance(value, FunctionType):
        type(cls).method_added(cls, name)
    elif isinstance(value, (staticmethod, classmethod)):
        type(cls).singleton_method_added(cls, name)


class _Undefined:
    """Placeholder left by `undef_method`; every lookup of the name fails."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, instance: object, owner: type | None = None) -> object:
        owner_name = owner.__qualname__ if owner is not None else "object"
        raise AttributeError(f"undefined method {self.name!r} for {owner_name}")


class Namespace(type):
    """Metaclass for classes used as namespaces of callables.

    Class creation fires `method_added` for every function declared in the
    body and `singleton_method_added` for every static or class method, in
    declaration order. Bases that are namespaces receive `included` first,
    since subclassing merges their members.

    The reflective operations below (define, remove, alias, conceal, compose)
    are what a stricter metaclass restricts. Hooks and operations are always
    dispatched through the metaclass.

    Reading a concealed member from outside raises `ConcealedMemberError`,
    which is not an `AttributeError`, so `hasattr` and `getattr` with a
    default propagate it. Introspect concealed namespaces with
    `singleton_methods()` or `inspect.getattr_static`, which never trigger
    the check.
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, object],
        **kwargs: object,
    ) -> Namespace:
        cls = super().__new__(mcs, name, bases, namespace, **kwargs)
        inherited: frozenset[str] = frozenset().union(
            *(vars(base).get(_CONCEALED, ()) for base in bases)
        )
        type.__setattr__(cls, _CONCEALED, inherited)
        for base in bases:
            _notify(base, "included", cls)
        for member, value in namespace.items():
            if not _is_dunder(member):
                _announce(cls, member, value)
        return cls

    def __getattribute__(cls, name: str) -> object:
        if not name.startswith("__"):
            members = type.__getattribute__(cls, "__dict__")
            if name in members.get(_CONCEALED, ()) and not _called_from_member(
                cls, sys._getframe(1)
            ):
                raise ConcealedMemberError(
                    namespace=type.__getattribute__(cls, "__qualname__"), member=name
                )
        return super().__getattribute__(name)

    def __setattr__(cls, name: str, value: object) -> None:
        super().__setattr__(name, value)
        if not _is_dunder(name):
            _announce(cls, name, value)

    def __delattr__(cls, name: str) -> None:
        if not _is_dunder(name) and isinstance(
            vars(cls).get(name), (FunctionType, staticmethod, classmethod)
        ):
            type(cls).remove_method(cls, name)
            return
        super().__delattr__(name)

    # Hooks

    def method_added(cls, name: str) -> None:
        logger.debug(
            "Method added", extra={"namespace": cls.__qualname__, "member": name}
        )

    def singleton_method_added(cls, name: str) -> None:
        logger.debug(
            "Singleton method added",
            extra={"namespace": cls.__qualname__, "member": name},
        )

    def extended(cls, target: type) -> None:
        logger.debug("Extended", extra={"namespace": cls.__qualname__})

    def included(cls, target: type) -> None:
        logger.debug("Included", extra={"namespace": cls.__qualname__})

    def prepended(cls, target: type) -> None:
        logger.debug("Prepended", extra={"namespace": cls.__qualname__})

    # Introspection

    def instance_method(cls, name: str) -> FunctionType:
        value = vars(cls).get(name)
        if not isinstance(value, FunctionType):
            raise AttributeError(f"undefined method {name!r} for {cls.__qualname__}")
        return value

    def instance_methods(cls) -> list[str]:
        return list(instance_functions(cls))

    def singleton_methods(cls) -> list[str]:
        return [
            name
            for name, value in vars(cls).items()
            if isinstance(value, (staticmethod, classmethod)) and not _is_dunder(name)
        ]

    # Members

    def define_method(cls, name: str, function: FunctionType) -> None:
        type.__setattr__(cls, name, function)
        type(cls).method_added(cls, name)

    def define_singleton_method(cls, name: str, function: FunctionType) -> None:
        type.__setattr__(cls, name, staticmethod(function))
        type(cls).singleton_method_added(cls, name)

    def remove_method(cls, name: str) -> None:
        if not isinstance(
            vars(cls).get(name), (FunctionType, staticmethod, classmethod)
        ):
            raise AttributeError(f"method {name!r} not defined in {cls.__qualname__}")
        type.__delattr__(cls, name)

    def undef_method(cls, name: str) -> None:
        type.__setattr__(cls, name, _Undefined(name))

    def alias_method(cls, new_name: str, old_name: str) -> None:
        value = inspect.getattr_static(cls, old_name, None)
        if not isinstance(value, (FunctionType, staticmethod, classmethod)):
            raise AttributeError(
                f"undefined method {old_name!r} for {cls.__qualname__}"
            )
        type.__setattr__(cls, new_name, value)
        _announce(cls, new_name, value)

    def private_class_method(cls, *names: str) -> None:
        for name in names:
            value = inspect.getattr_static(cls, name, None)
            if not isinstance(value, (staticmethod, classmethod)):
                raise AttributeError(
                    f"undefined method {name!r} for {cls.__qualname__}"
                )
        concealed: frozenset[str] = vars(cls).get(_CONCEALED, frozenset())
        type.__setattr__(cls, _CONCEALED, concealed | frozenset(names))

    # Shared state

    def const_set(cls, name: str, value: object) -> None:
        if not name[:1].isupper():
            raise ValueError(f"wrong constant name {name}")
        type.__setattr__(cls, name, value)

    def class_variable_set(cls, name: str, value: object) -> None:
        type.__setattr__(cls, name, value)

    def class_variable_get(cls, name: str) -> object:
        value = inspect.getattr_static(cls, name, _MISSING)
        if value is _MISSING:
            raise AttributeError(
                f"uninitialized class variable {name} in {cls.__qualname__}"
            )
        return value

    # Composition

    def extend(cls, *sources: type) -> None:
        """Copy each source's functions onto this namespace as static members."""
        for source in sources:
            _notify(source, "extended", cls)
            for name, function in instance_functions(source).items():
                type.__setattr__(cls, name, staticmethod(function))

    def include(cls, *sources: type) -> None:
        """Merge each source's functions in; this namespace's own members win."""
        for source in sources:
            _notify(source, "included", cls)
            own = vars(cls)
            for name, function in instance_functions(source).items():
                if name not in own:
                    type.__setattr__(cls, name, function)

    def prepend(cls, *sources: type) -> None:
        """Merge each source's functions in ahead of this namespace's own."""
        for source in sources:
            _notify(source, "prepended", cls)
            for name, function in instance_functions(source).items():
                type.__setattr__(cls, name, function)

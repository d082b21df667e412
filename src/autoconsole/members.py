from __future__ import annotations

import dataclasses
import functools
import inspect
import types
import typing
from collections.abc import Mapping, MutableMapping
from enum import Enum, EnumMeta
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .types import (
    CoercionError,
    InvocationError,
    MemberNotFound,
    MethodDescriptor,
    NoMatchingOverload,
    ParamInfo,
    PropertyDescriptor,
    _SizedInt,
)

NAME_ATTR = "__console_name__"
SHOW_ATTR = "__console_show__"

# dataclass field metadata keys
DISPLAY_KEY = "display_name"
SHOW_KEY = "show_in_console"

UNKNOWN = inspect.Parameter.empty

# class-level descriptors read as properties, never listed as methods
_PROPERTY_TYPES = (property, functools.cached_property, types.DynamicClassAttribute)

F = TypeVar("F")

# ---------- Member annotations ----------

def _mark_target(obj: Any) -> Any:
    if isinstance(obj, (property, types.DynamicClassAttribute)):
        return obj.fget
    if isinstance(obj, functools.cached_property):
        return obj.func
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj

def display_name(name: str) -> Callable[[F], F]:
    """Give a method or property getter a user-facing name.

    Methods sharing a display name become overloads of one another.
    """
    def dec(obj: F) -> F:
        setattr(_mark_target(obj), NAME_ATTR, name)
        return obj

    return dec

def show_in_console(obj: Optional[F] = None, *, name: Optional[str] = None) -> Any:
    """Mark a member for the member listing; optionally rename it too."""
    def dec(inner: F) -> F:
        target = _mark_target(inner)
        setattr(target, SHOW_ATTR, True)
        if name is not None:
            setattr(target, NAME_ATTR, name)
        return inner

    if obj is not None:
        return dec(obj)

    return dec

def _display(func: Any, default: str) -> str:
    return getattr(func, NAME_ATTR, None) or default

def _shown(func: Any) -> bool:
    return bool(getattr(func, SHOW_ATTR, False))

# ---------- Type hints ----------

def _hints(obj: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError, AttributeError):
        return dict(getattr(obj, "__annotations__", None) or {})

def _is_union(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    return origin is typing.Union or origin is types.UnionType

def _is_unknown(annotation: Any) -> bool:
    return annotation is UNKNOWN or annotation is Any or annotation is object

def is_nullable(annotation: Any) -> bool:
    if _is_unknown(annotation) or annotation is None or annotation is type(None):
        return True

    if isinstance(annotation, str):
        # unresolved forward reference
        return "None" in annotation or "Optional" in annotation

    if _is_union(annotation):
        return type(None) in typing.get_args(annotation)

    return False

# ---------- Introspection ----------

def describe_properties(target: Any) -> List[PropertyDescriptor]:
    """Public properties of *target* in declaration order."""
    if target is None:
        return []

    if isinstance(target, Mapping):
        writable = isinstance(target, MutableMapping)
        return [
            PropertyDescriptor(key, key, UNKNOWN, True, writable)
            for key in target
            if isinstance(key, str)
        ]

    cls = type(target)
    hints = _hints(cls)
    props: List[PropertyDescriptor] = []
    seen: set[str] = set()

    if dataclasses.is_dataclass(target):
        params = getattr(cls, "__dataclass_params__", None)
        frozen = bool(getattr(params, "frozen", False))

        for fld in dataclasses.fields(target):
            if fld.name.startswith("_"):
                continue

            seen.add(fld.name)
            props.append(PropertyDescriptor(
                name=fld.name,
                display_name=fld.metadata.get(DISPLAY_KEY, fld.name),
                value_type=hints.get(fld.name, UNKNOWN),
                readable=True,
                writable=not frozen,
                shown=bool(fld.metadata.get(SHOW_KEY, False)),
            ))

    for name in getattr(target, "__dict__", {}):
        if name.startswith("_") or name in seen:
            continue

        seen.add(name)
        props.append(PropertyDescriptor(name, name, hints.get(name, UNKNOWN), True, True))

    for klass in cls.__mro__:
        if klass is object:
            continue

        for name, attr in vars(klass).items():
            if name.startswith("_") or name in seen:
                continue
            if isinstance(klass, EnumMeta) and name in klass.__members__:
                continue

            seen.add(name)

            if isinstance(attr, _PROPERTY_TYPES):
                getter = _mark_target(attr)
                returns = _hints(getter).get("return", UNKNOWN) if getter is not None else UNKNOWN
                props.append(PropertyDescriptor(
                    name=name,
                    display_name=_display(getter, name),
                    value_type=returns,
                    readable=getter is not None,
                    writable=_writable_descriptor(attr),
                    shown=_shown(getter),
                ))
            elif inspect.isgetsetdescriptor(attr) or inspect.ismemberdescriptor(attr):
                props.append(PropertyDescriptor(
                    name, name, UNKNOWN, True, inspect.ismemberdescriptor(attr)
                ))
            elif not callable(attr) and not hasattr(type(attr), "__get__"):
                # plain class attribute, shadowed per instance on write
                props.append(PropertyDescriptor(name, name, hints.get(name, UNKNOWN), True, True))

    return props

def _writable_descriptor(attr: Any) -> bool:
    if isinstance(attr, functools.cached_property):
        return True
    if isinstance(attr, property):
        return attr.fset is not None
    # enum name/value
    return False

def _params(bound: Any, func: Any) -> Optional[Tuple[ParamInfo, ...]]:
    try:
        sig = inspect.signature(bound)
    except (TypeError, ValueError):
        return None

    hints = _hints(func)
    out: List[ParamInfo] = []

    for param in sig.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        optional = param.default is not param.empty

        if param.kind == param.KEYWORD_ONLY:
            if not optional:
                # no way to pass it positionally
                return None
            continue

        annotation = hints.get(param.name, param.annotation)
        nullable = is_nullable(annotation) or (optional and param.default is None)
        out.append(ParamInfo(param.name, annotation, nullable, optional))

    return tuple(out)

def describe_methods(target: Any) -> List[MethodDescriptor]:
    """Public invocable methods of *target*, most-derived class first."""
    if target is None:
        return []

    methods: List[MethodDescriptor] = []
    seen: set[str] = set()

    for klass in type(target).__mro__:
        if klass is object:
            continue

        for name, attr in vars(klass).items():
            if name.startswith("_") or name in seen:
                continue

            seen.add(name)
            func = _mark_target(attr)

            if isinstance(attr, _PROPERTY_TYPES):
                continue
            if not (inspect.isfunction(func) or inspect.ismethoddescriptor(func)):
                continue

            bound = getattr(target, name, None)
            if not callable(bound):
                continue

            params = _params(bound, func)
            if params is None:
                continue

            methods.append(MethodDescriptor(name, _display(func, name), params, _shown(func)))

    return methods

def find_property(target: Any, name: str) -> Optional[PropertyDescriptor]:
    for prop in describe_properties(target):
        if prop.display_name == name:
            return prop

    return None

def member_names(target: Any) -> List[str]:
    names: List[str] = []

    for member in [*describe_properties(target), *describe_methods(target)]:
        if member.display_name not in names:
            names.append(member.display_name)

    return names

# ---------- Property access ----------

def read_property(target: Any, name: str) -> Any:
    prop = find_property(target, name)
    if prop is None or not prop.readable:
        raise MemberNotFound(target, name, "property")

    if isinstance(target, Mapping):
        return target[prop.name]

    try:
        return getattr(target, prop.name)
    except Exception as exc:
        raise InvocationError(name, exc) from exc

def write_property(target: Any, name: str, value: Any) -> Any:
    """Assign ``target.name = value`` after coercing to the declared type; returns what was stored."""
    prop = find_property(target, name)
    if prop is None or not prop.writable:
        raise MemberNotFound(target, name, "writable property")

    coerced = coerce_value(value, prop.value_type)

    if isinstance(target, MutableMapping):
        target[prop.name] = coerced
        return coerced

    try:
        setattr(target, prop.name, coerced)
    except Exception as exc:
        raise InvocationError(name, exc) from exc

    return coerced

# ---------- Coercion ----------

def _as_integral(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None

def coerce_value(value: Any, annotation: Any) -> Any:
    """Convert *value* for a slot declared as *annotation* or raise CoercionError."""
    if value is None:
        if is_nullable(annotation):
            return None
        raise CoercionError(value, annotation)

    if _is_unknown(annotation) or isinstance(annotation, str):
        return value

    if _is_union(annotation):
        for arm in typing.get_args(annotation):
            if arm is type(None):
                continue
            try:
                return coerce_value(value, arm)
            except CoercionError:
                continue
        raise CoercionError(value, annotation)

    origin = typing.get_origin(annotation)
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return value

    if annotation is bool:
        if isinstance(value, bool):
            return value
        raise CoercionError(value, annotation)

    if issubclass(annotation, _SizedInt):
        num = _as_integral(value)
        if num is None or not annotation.fits(num):
            raise CoercionError(value, annotation)
        return annotation(num)

    if annotation is int:
        num = _as_integral(value)
        if num is None:
            raise CoercionError(value, annotation)
        return num

    if annotation is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise CoercionError(value, annotation)

    if issubclass(annotation, Enum) and isinstance(value, str):
        try:
            return annotation[value]
        except KeyError:
            raise CoercionError(value, annotation) from None

    if isinstance(value, annotation):
        return value

    raise CoercionError(value, annotation)

def _coerce_argument(value: Any, param: ParamInfo) -> Any:
    if value is None:
        if param.nullable:
            return None
        raise CoercionError(value, param.annotation)

    return coerce_value(value, param.annotation)

# ---------- Method resolution ----------

def resolve_method(target: Any, name: str, args: List[Any]) -> Tuple[MethodDescriptor, List[Any]]:
    """Pick the first declared overload of *name* that takes *args*.

    A candidate matches when its arity fits and every argument either has
    the parameter's type or converts to it; a failed conversion only rules
    out that candidate.
    """
    candidates = [m for m in describe_methods(target) if m.display_name == name]
    if not candidates:
        raise MemberNotFound(target, name, "method")

    for method in candidates:
        if not method.accepts_count(len(args)):
            continue

        try:
            coerced = [_coerce_argument(arg, param) for arg, param in zip(args, method.params)]
        except CoercionError:
            continue

        return method, coerced

    raise NoMatchingOverload(target, name, args)

def invoke_method(target: Any, name: str, args: List[Any]) -> Any:
    method, coerced = resolve_method(target, name, args)
    func = getattr(target, method.name)

    try:
        return func(*coerced)
    except Exception as exc:
        raise InvocationError(name, exc) from exc

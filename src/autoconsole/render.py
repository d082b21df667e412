from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, List, Tuple

from .members import describe_methods, describe_properties, read_property
from .types import ConsoleError, MethodDescriptor, PropertyDescriptor, type_label


def format_value(value: Any) -> str:
    if value is None:
        return "null"

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, str):
        return value

    if isinstance(value, Enum):
        return value.name

    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_item(item) for item in value) + "]"

    if isinstance(value, Mapping):
        pairs = [f"{_format_item(k)}: {_format_item(v)}" for k, v in value.items()]
        return "{ " + ", ".join(pairs) + " }" if pairs else "{}"

    return str(value)


def _format_item(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'

    return format_value(value)


def visible_members(target: Any, show_all: bool = False) -> Tuple[List[PropertyDescriptor], List[MethodDescriptor]]:
    """Members for the listing.

    Members marked with ``show_in_console`` are listed; when the type marks
    none of them, or *show_all* is set, everything is.
    """
    props = describe_properties(target)
    methods = describe_methods(target)

    if show_all or not any(m.shown for m in [*props, *methods]):
        return props, methods

    return [p for p in props if p.shown], [m for m in methods if m.shown]


def format_signature(method: MethodDescriptor) -> str:
    params = []

    for param in method.params:
        label = f"{param.name}: {type_label(param.annotation)}"
        params.append(f"[{label}]" if param.optional else label)

    return f"{method.display_name}({', '.join(params)})"


def format_members(target: Any, show_all: bool = False) -> List[str]:
    props, methods = visible_members(target, show_all)
    lines: List[str] = []

    for prop in props:
        if not prop.readable:
            lines.append(f"{prop.display_name} (write-only)")
            continue

        try:
            shown = format_value(read_property(target, prop.display_name))
        except ConsoleError as exc:
            shown = f"<{exc}>"

        suffix = "" if prop.writable else " (read-only)"
        lines.append(f"{prop.display_name} = {shown}{suffix}")

    for method in methods:
        lines.append(format_signature(method))

    return lines

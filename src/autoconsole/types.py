from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, List, Optional, Tuple
from typing_extensions import TypeAlias

# ---------- Typed integers ----------

class _SizedInt(int):
    MIN = 0
    MAX = 0
    BITS = 0

    def __new__(cls, value: Any = 0) -> '_SizedInt':
        num = int(value)
        if num < cls.MIN or num > cls.MAX:
            raise OverflowError(f"{num} does not fit in {cls.__name__}")
        return super().__new__(cls, num)

    def __repr__(self) -> str:
        return int.__repr__(self)

    @classmethod
    def fits(cls, value: int) -> bool:
        return cls.MIN <= value <= cls.MAX

class Int8(_SizedInt):
    MIN, MAX, BITS = -2**7, 2**7 - 1, 8

class Int16(_SizedInt):
    MIN, MAX, BITS = -2**15, 2**15 - 1, 16

class Int32(_SizedInt):
    MIN, MAX, BITS = -2**31, 2**31 - 1, 32

class Int64(_SizedInt):
    MIN, MAX, BITS = -2**63, 2**63 - 1, 64

# Narrowest first; literal typing walks this in order.
INT_WIDTHS: Tuple[type, ...] = (Int8, Int16, Int32, Int64)

class LiteralKind(Enum):
    NULL = auto()
    BOOL = auto()
    INT8 = auto()
    INT16 = auto()
    INT32 = auto()
    INT64 = auto()
    FLOAT = auto()
    STRING = auto()
    PROPERTY = auto()
    STRUCTURED = auto()

INT_KINDS = {
    Int8: LiteralKind.INT8,
    Int16: LiteralKind.INT16,
    Int32: LiteralKind.INT32,
    Int64: LiteralKind.INT64,
}

@dataclass(frozen=True)
class Parsed:
    """Literal parser result. ``ok`` separates a parsed null from a failure."""
    ok: bool
    value: Any = None
    kind: Optional[LiteralKind] = None

NOT_PARSED = Parsed(False)

# ---------- Member descriptors ----------

@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    display_name: str
    value_type: Any
    readable: bool
    writable: bool
    shown: bool = False

@dataclass(frozen=True)
class ParamInfo:
    name: str
    annotation: Any
    nullable: bool
    optional: bool = False

@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    display_name: str
    params: Tuple[ParamInfo, ...]
    shown: bool = False

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def required_arity(self) -> int:
        return sum(1 for p in self.params if not p.optional)

    def accepts_count(self, count: int) -> bool:
        return self.required_arity <= count <= self.arity

MemberDescriptor: TypeAlias = PropertyDescriptor | MethodDescriptor

Emit: TypeAlias = Callable[[str], None]

# ---------- Evaluation records ----------

@dataclass
class EvalState:
    """Per-line evaluation state threaded through the recursion."""
    source: str
    push: bool = False
    depth: int = 0

@dataclass
class Outcome:
    value: Any = None
    ok: bool = False
    push: bool = False
    error: Optional['ConsoleError'] = None

    @property
    def blank(self) -> bool:
        return not self.ok and self.error is None

# ---------- Exceptions ----------

class ConsoleError(Exception):
    pass

class ParseError(ConsoleError):
    def __init__(self, message: str, text: Optional[str] = None):
        super().__init__(message)
        self.text = text

class ResolutionError(ConsoleError):
    pass

class MemberNotFound(ResolutionError):
    def __init__(self, target: Any, name: str, kind: str = "member"):
        super().__init__(f"{type(target).__name__} has no {kind} '{name}'")
        self.target = target
        self.name = name
        self.kind = kind

class NoMatchingOverload(ResolutionError):
    def __init__(self, target: Any, name: str, args: List[Any]):
        types = ", ".join(type(a).__name__ for a in args)
        super().__init__(f"{type(target).__name__}.{name} has no overload for ({types})")
        self.target = target
        self.name = name
        self.args = list(args)

class IndexOutOfRange(ResolutionError):
    def __init__(self, index: int, length: int):
        super().__init__(f"Index {index} is out of range for length {length}")
        self.index = index
        self.length = length

class CoercionError(ConsoleError):
    def __init__(self, value: Any, annotation: Any):
        super().__init__(f"Cannot convert {value!r} to {type_label(annotation)}")
        self.value = value
        self.annotation = annotation

class InvocationError(ConsoleError):
    """Raised when the resolved method itself fails."""
    def __init__(self, name: str, original: BaseException):
        super().__init__(f"{name} raised {type(original).__name__}: {original}")
        self.name = name
        self.original = original

class ContextStackError(ConsoleError):
    pass

def type_label(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty or annotation is None:
        return "object"
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")

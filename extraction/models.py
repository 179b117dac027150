"""
Raw extraction records.

Everything here is copied out of the declaration tree, so the records stay
valid after the parse session is closed.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from extraction.declarations import TypeExpr


@dataclass(frozen=True)
class RawArg:
    """A named method argument with its unmapped type expression."""

    name: str
    type: TypeExpr


@dataclass(frozen=True)
class RawMethod:
    """An eligible method before type mapping.

    Attributes:
        name: Simple method name as declared.
        display_name: Rendering used in diagnostics, ``Name(arg types)``.
        is_static: Whether the method is a static member.
        args: Ordered arguments.
        result_type: Unmapped return type expression.
    """

    name: str
    display_name: str
    is_static: bool
    args: Tuple[RawArg, ...]
    result_type: Optional[TypeExpr]


@dataclass(frozen=True)
class RawClass:
    """An eligible class with its eligible methods in declaration order."""

    name: str
    methods: Tuple[RawMethod, ...] = ()


@dataclass(frozen=True)
class DroppedItem:
    """One method left out of the generated surface, with the reason."""

    class_name: str
    method: str
    kind: str
    reason: str
    stage: str = "extract"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

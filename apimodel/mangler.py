"""Overload disambiguation through the mangle table."""

from typing import Iterable, Sequence

from apimodel.tables import METHOD_MANGLES, MethodMangle


def mangle(
    name: str,
    arg_names: Iterable[str],
    table: Sequence[MethodMangle] = METHOD_MANGLES,
) -> str:
    """Return the external symbol suffix of a method.

    The first table row whose name equals ``name`` and whose unique argument
    is among ``arg_names`` wins; without a match the name is kept.

    Example:
        >>> mangle("Set", ["context", "index", "value"])
        'Set_Index'
        >>> mangle("IsString", [])
        'IsString'
    """
    names = set(arg_names)
    for entry in table:
        if entry.name == name and entry.unique_arg in names:
            return entry.mangle
    return name

"""
Class and method extraction from the declaration tree.

This module walks a parsed public interface, selects the eligible classes of
the target namespace and their eligible methods, and copies out raw
``(name, args, return type)`` records for the type mapper.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from apimodel.tables import EXCLUDED_CLASSES, EXCLUDED_METHODS, method_key
from extraction.config import DEFAULT_NAMESPACE
from extraction.declarations import (
    Accessibility,
    Availability,
    Declaration,
    DeclKind,
    TypeKind,
)
from extraction.models import DroppedItem, RawArg, RawClass, RawMethod

logger = logging.getLogger(__name__)


class MethodExtractionError(ValueError):
    """Raised when a selected method cannot be copied out completely."""


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_parsed = 0
        self.parse_errors = 0
        self.classes_extracted = 0
        self.classes_excluded = 0
        self.methods_extracted = 0
        self.methods_dropped = 0
        self.dropped: List[DroppedItem] = []

    def record_drop(self, item: DroppedItem) -> None:
        self.methods_dropped += 1
        self.dropped.append(item)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "files_parsed": self.files_parsed,
            "parse_errors": self.parse_errors,
            "classes_extracted": self.classes_extracted,
            "classes_excluded": self.classes_excluded,
            "methods_extracted": self.methods_extracted,
            "methods_dropped": self.methods_dropped,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(classes={self.classes_extracted}, "
            f"excluded={self.classes_excluded}, methods={self.methods_extracted}, "
            f"dropped={self.methods_dropped}, parse_errors={self.parse_errors})"
        )


def _select_namespaces(root: Declaration, namespace: str) -> Iterable[Declaration]:
    for child in root.children():
        if child.kind == DeclKind.NAMESPACE and child.name == namespace:
            yield child


def _is_candidate_method(
    decl: Declaration, class_name: str, excluded_methods: FrozenSet[str]
) -> bool:
    if decl.kind != DeclKind.METHOD:
        return False
    if decl.availability != Availability.AVAILABLE:
        return False
    if decl.accessibility != Accessibility.PUBLIC:
        return False
    name = decl.name
    if name is None:
        # unnamed methods are reported by extract_method
        return True
    if name.startswith("operator"):
        return False
    return method_key(class_name, name) not in excluded_methods


def extract_method(decl: Declaration) -> RawMethod:
    """Copy one method declaration out of the tree.

    Args:
        decl: A method declaration of a selected class.

    Returns:
        The raw method record.

    Raises:
        MethodExtractionError: If the method name, an argument name, an
            argument type or the return type cannot be retrieved.
    """
    name = decl.name
    if name is None:
        raise MethodExtractionError("method has no retrievable name")

    arguments = decl.arguments()
    if arguments is None:
        raise MethodExtractionError("method has no retrievable argument list")

    raw_args: List[RawArg] = []
    for position, argument in enumerate(arguments):
        arg_name = argument.name
        arg_type = argument.type
        if (
            arg_type is not None
            and arg_type.kind == TypeKind.INVALID
            and arg_type.display_name == "..."
        ):
            raise MethodExtractionError(f"argument {position} is variadic")
        if arg_name is None:
            raise MethodExtractionError(f"argument {position} has no retrievable name")
        if arg_type is None:
            raise MethodExtractionError(f"argument {arg_name} has no retrievable type")
        raw_args.append(RawArg(name=arg_name, type=arg_type))

    result_type = decl.result_type
    if result_type is None:
        raise MethodExtractionError("method has no retrievable return type")

    return RawMethod(
        name=name,
        display_name=decl.display_name,
        is_static=decl.is_static_method,
        args=tuple(raw_args),
        result_type=result_type,
    )


def extract_class(
    decl: Declaration,
    excluded_methods: FrozenSet[str] = EXCLUDED_METHODS,
    stats: Optional[ExtractionStats] = None,
) -> RawClass:
    """Extract the eligible methods of one selected class."""
    class_name = decl.name
    methods: List[RawMethod] = []
    for member in decl.children():
        if not _is_candidate_method(member, class_name, excluded_methods):
            continue
        try:
            methods.append(extract_method(member))
        except MethodExtractionError as e:
            display_name = member.display_name
            logger.warning(
                "Could not translate method %s::%s (%s): %s",
                class_name,
                display_name,
                member.kind.name,
                e,
            )
            if stats is not None:
                stats.record_drop(
                    DroppedItem(
                        class_name=class_name,
                        method=display_name,
                        kind=member.kind.name,
                        reason=str(e),
                    )
                )
    if stats is not None:
        stats.methods_extracted += len(methods)
    return RawClass(name=class_name, methods=tuple(methods))


def extract_classes(
    root: Declaration,
    namespace: str = DEFAULT_NAMESPACE,
    stats: Optional[ExtractionStats] = None,
    excluded_classes: FrozenSet[str] = EXCLUDED_CLASSES,
    excluded_methods: FrozenSet[str] = EXCLUDED_METHODS,
) -> List[RawClass]:
    """Extract the eligible classes of a namespace, in declaration order.

    Args:
        root: Translation unit declaration of an open parse session.
        namespace: Name of the target namespace; only immediate children of
            the root with exactly this name are searched.
        stats: Optional statistics accumulator.
        excluded_classes: Class names never extracted.
        excluded_methods: ``Class::Method`` strings never extracted.

    Returns:
        Raw classes, in declaration order.

    Example:
        >>> with ParseSession("include/v8.h", ["include"]) as session:
        ...     classes = extract_classes(session.root, "v8")
    """
    classes: List[RawClass] = []
    for ns in _select_namespaces(root, namespace):
        for child in ns.children():
            if child.kind != DeclKind.CLASS_DECL:
                continue
            name = child.name
            if name is None or not child.children():
                continue
            if name in excluded_classes:
                if stats is not None:
                    stats.classes_excluded += 1
                continue
            classes.append(extract_class(child, excluded_methods, stats))

    if stats is not None:
        stats.classes_extracted += len(classes)
    logger.info("Extracted %d classes from namespace %s", len(classes), namespace)
    return classes

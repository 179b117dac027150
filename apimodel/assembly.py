"""
Model assembly.

Turns raw extraction records into the immutable ``Api`` value: maps every
type, applies the mangle table, and drops (with a warning) each method that
cannot be bridged through a C ABI.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from apimodel.api import Api, Arg, Class, Method
from apimodel.mangler import mangle
from apimodel.tables import (
    CONTEXT_CLASS,
    HAND_WRITTEN_POINTER_CLASSES,
    MAYBE_PRIMITIVES,
    METHOD_MANGLES,
    RESERVED_ARG_NAMES,
    MethodMangle,
)
from apimodel.type_mapper import TypeMapper, TypeMappingError
from apimodel.types import Arr, ClassType, Direct, Maybe, Prim, Ptr, Ref, Type, is_class_ref
from extraction.config import DEFAULT_NAMESPACE
from extraction.extractor import ExtractionStats
from extraction.models import DroppedItem, RawClass, RawMethod

logger = logging.getLogger(__name__)


class AssemblyStats(ExtractionStats):
    """Extraction statistics plus the assembly step's counters."""

    def __init__(self):
        super().__init__()
        self.methods_unmapped = 0
        self.methods_unbridgeable = 0
        self.methods_assembled = 0

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "methods_unmapped": self.methods_unmapped,
            "methods_unbridgeable": self.methods_unbridgeable,
            "methods_assembled": self.methods_assembled,
        })
        return data

    def __str__(self) -> str:
        return (
            f"AssemblyStats(classes={self.classes_extracted}, "
            f"excluded={self.classes_excluded}, methods={self.methods_assembled}, "
            f"dropped={self.methods_dropped}, parse_errors={self.parse_errors})"
        )


def build_method(
    raw: RawMethod,
    mapper: TypeMapper,
    mangles: Sequence[MethodMangle] = METHOD_MANGLES,
) -> Method:
    """Map and mangle one raw method.

    Raises:
        TypeMappingError: If the return type or any argument type fails.
    """
    ret_type = mapper.map_return_type(raw.result_type)
    args = tuple(Arg(name=arg.name, arg_type=mapper.map_type(arg.type)) for arg in raw.args)
    return Method(
        is_static=raw.is_static,
        name=raw.name,
        mangled_name=mangle(raw.name, (arg.name for arg in args), mangles),
        args=args,
        ret_type=ret_type,
    )


def _pointer_target_problem(inner: Type, modeled: FrozenSet[str]) -> Optional[str]:
    if isinstance(inner, Prim):
        return None
    if isinstance(inner, ClassType):
        if inner.name in modeled or inner.name in HAND_WRITTEN_POINTER_CLASSES:
            return None
        return f"pointer to unmodeled class {inner.name}"
    if isinstance(inner, Ptr):
        return _pointer_target_problem(inner.inner, modeled)
    return f"pointer to {inner}"


def type_problem(typ: Type, modeled: FrozenSet[str], is_return: bool = False) -> Optional[str]:
    """Describe why ``typ`` cannot cross the C ABI, or None when it can."""
    if isinstance(typ, Prim):
        if typ is Prim.VOID and not is_return:
            return "void argument"
        return None
    if isinstance(typ, ClassType):
        return f"class {typ.name} passed by value"
    if isinstance(typ, Ref):
        if isinstance(typ.inner, ClassType) and typ.inner.name in modeled:
            return None
        return f"handle to unmodeled type {typ.inner}"
    if isinstance(typ, Ptr):
        return _pointer_target_problem(typ.inner, modeled)
    if isinstance(typ, Arr):
        if is_return:
            return "array return"
        if isinstance(typ.inner, Prim) and typ.inner is not Prim.VOID:
            return None
        return f"array of {typ.inner}"
    return f"unsupported type {typ}"


def method_problem(method: Method, modeled: FrozenSet[str]) -> Optional[str]:
    """Describe why ``method`` cannot be bridged, or None when it can."""
    ret = method.ret_type
    if isinstance(ret, Maybe):
        payload = ret.type
        if isinstance(payload, Prim):
            if payload not in MAYBE_PRIMITIVES:
                return f"no Maybe result struct for {payload}"
        elif isinstance(payload, (Ref, Ptr)):
            problem = type_problem(payload, modeled, is_return=True)
            if problem:
                return problem
        else:
            return f"unsupported Maybe payload {payload}"
    else:
        problem = type_problem(ret.type, modeled, is_return=True)
        if problem:
            return problem

    context_args = 0
    for arg in method.args:
        if arg.name in RESERVED_ARG_NAMES:
            return f"argument name {arg.name} is reserved"
        problem = type_problem(arg.arg_type, modeled)
        if problem:
            return f"argument {arg.name}: {problem}"
        if is_class_ref(arg.arg_type, CONTEXT_CLASS):
            context_args += 1
    if context_args > 1:
        return "more than one context argument"
    return None


def _record_drop(
    stats: Optional[AssemblyStats],
    class_name: str,
    raw: RawMethod,
    reason: str,
    stage: str,
) -> None:
    if stats is None:
        return
    if stage == "map":
        stats.methods_unmapped += 1
    else:
        stats.methods_unbridgeable += 1
    stats.record_drop(
        DroppedItem(
            class_name=class_name,
            method=raw.display_name,
            kind="METHOD",
            reason=reason,
            stage=stage,
        )
    )


def assemble_class(
    raw_class: RawClass,
    mapper: TypeMapper,
    modeled: FrozenSet[str],
    mangles: Sequence[MethodMangle] = METHOD_MANGLES,
    stats: Optional[AssemblyStats] = None,
) -> Class:
    """Build one ``Class``, dropping the methods that cannot be bridged."""
    methods: List[Method] = []
    symbols: Set[str] = set()
    for raw in raw_class.methods:
        try:
            method = build_method(raw, mapper, mangles)
        except TypeMappingError as e:
            logger.warning(
                "Could not translate method %s::%s (METHOD): %s",
                raw_class.name,
                raw.display_name,
                e,
            )
            _record_drop(stats, raw_class.name, raw, str(e), "map")
            continue

        problem = method_problem(method, modeled)
        if problem is None and method.mangled_name in symbols:
            problem = f"symbol {method.mangled_name} already emitted for this class"
        if problem is not None:
            logger.warning(
                "Cannot bridge method %s::%s (METHOD): %s",
                raw_class.name,
                raw.display_name,
                problem,
            )
            _record_drop(stats, raw_class.name, raw, problem, "bridge")
            continue

        symbols.add(method.mangled_name)
        methods.append(method)

    if stats is not None:
        stats.methods_assembled += len(methods)
    return Class(name=raw_class.name, methods=tuple(methods))


def assemble_api(
    raw_classes: Iterable[RawClass],
    namespace: str = DEFAULT_NAMESPACE,
    mangles: Sequence[MethodMangle] = METHOD_MANGLES,
    stats: Optional[AssemblyStats] = None,
) -> Api:
    """Assemble the ``Api`` from raw classes, preserving their order."""
    raw_classes = list(raw_classes)
    mapper = TypeMapper(namespace)
    modeled = frozenset(raw.name for raw in raw_classes)
    classes = tuple(
        assemble_class(raw, mapper, modeled, mangles, stats) for raw in raw_classes
    )
    api = Api(classes=classes)
    logger.info(
        "Assembled %d classes with %d methods", len(api.classes), api.method_count
    )
    return api

"""Glue generation configuration.

Loads the optional YAML/JSON config file with strict/non-strict validation
and resolves the public header path.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import yaml

from emitters.common import (
    DEFAULT_CONTEXT_TYPE,
    DEFAULT_DECLARATIONS_HEADER,
    DEFAULT_GLUE_HEADER,
    DEFAULT_IMPLEMENTATION_FILE,
    DEFAULT_PROTOTYPES_HEADER,
)
from extraction.config import (
    DEFAULT_DEPRECATION_MACROS,
    DEFAULT_NAMESPACE,
    DEFAULT_STRIPPED_MACROS,
)

logger = logging.getLogger(__name__)

STRICT_CONFIG_ENV = "GLUEGEN_STRICT_CONFIG"
SOURCE_DIR_ENV = "V8_SOURCE"
SYSTEM_HEADER_PATH = "/usr/include/v8.h"
DEFAULT_OUTPUT_DIR = "output/glue"


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


@dataclass(frozen=True)
class ArtifactNames:
    """File names of the three generated artifacts."""

    declarations: str = DEFAULT_DECLARATIONS_HEADER
    prototypes: str = DEFAULT_PROTOTYPES_HEADER
    implementation: str = DEFAULT_IMPLEMENTATION_FILE


@dataclass(frozen=True)
class MacroConfig:
    """Macros neutralised before parsing."""

    strip: tuple[str, ...] = DEFAULT_STRIPPED_MACROS
    deprecated: tuple[str, ...] = DEFAULT_DEPRECATION_MACROS


@dataclass(frozen=True)
class GlueConfig:
    """Top-level generation settings."""

    namespace: str = DEFAULT_NAMESPACE
    header: Optional[str] = None
    include_dirs: tuple[str, ...] = ()
    output_dir: str = DEFAULT_OUTPUT_DIR
    context_type: str = DEFAULT_CONTEXT_TYPE
    glue_header: str = DEFAULT_GLUE_HEADER
    artifacts: ArtifactNames = field(default_factory=ArtifactNames)
    macros: MacroConfig = field(default_factory=MacroConfig)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config(default: bool = False) -> bool:
    """Resolve strict validation mode from ``GLUEGEN_STRICT_CONFIG`` env."""
    return _env_flag(STRICT_CONFIG_ENV, default=default)


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"{ctx} must be an object")
    return payload


def _string(payload: Mapping[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    value = payload.get(key, default)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value.strip()


def _string_list(payload: Mapping[str, Any], key: str, default: Sequence[str]) -> tuple[str, ...]:
    value = payload.get(key)
    if value is None:
        return tuple(default)
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ValueError(f"{key} must be a list of non-empty strings")
    return tuple(v.strip() for v in value)


def load_config_payload(path: str, strict: bool = False) -> dict[str, Any]:
    """Load a YAML (or ``.json``) config file.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Config file not readable: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Failed to parse config at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        msg = f"Config file is empty: {config_path}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def parse_glue_config(payload: Mapping[str, Any]) -> GlueConfig:
    """Validate a config payload.

    Raises:
        ValueError: If a key has the wrong shape.
    """
    defaults = GlueConfig()
    artifacts_raw = _expect_dict(payload.get("artifacts", {}), "artifacts")
    macros_raw = _expect_dict(payload.get("macros", {}), "macros")

    artifacts = ArtifactNames(
        declarations=_string(artifacts_raw, "declarations", defaults.artifacts.declarations),
        prototypes=_string(artifacts_raw, "prototypes", defaults.artifacts.prototypes),
        implementation=_string(
            artifacts_raw, "implementation", defaults.artifacts.implementation
        ),
    )
    if len({artifacts.declarations, artifacts.prototypes, artifacts.implementation}) != 3:
        raise ValueError("artifact file names must be distinct")

    namespace = _string(payload, "namespace", defaults.namespace)
    if "::" in namespace:
        raise ValueError("namespace must be a single identifier")

    return GlueConfig(
        namespace=namespace,
        header=_string(payload, "header", None),
        include_dirs=_string_list(payload, "include_dirs", ()),
        output_dir=_string(payload, "output_dir", defaults.output_dir),
        context_type=_string(payload, "context_type", defaults.context_type),
        glue_header=_string(payload, "glue_header", defaults.glue_header),
        artifacts=artifacts,
        macros=MacroConfig(
            strip=_string_list(macros_raw, "strip", defaults.macros.strip),
            deprecated=_string_list(macros_raw, "deprecated", defaults.macros.deprecated),
        ),
    )


def load_glue_config(path: Optional[str] = None, strict: bool = False) -> GlueConfig:
    """Load the generation config, falling back to defaults when non-strict."""
    if path is None:
        return GlueConfig()
    payload = load_config_payload(path, strict=strict)
    try:
        return parse_glue_config(payload)
    except ValueError as exc:
        msg = f"Invalid config {path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return GlueConfig()


def apply_overrides(config: GlueConfig, **overrides: Any) -> GlueConfig:
    """Return ``config`` with every non-None override applied."""
    values = {key: value for key, value in overrides.items() if value is not None}
    if "include_dirs" in values:
        values["include_dirs"] = tuple(values["include_dirs"])
    return replace(config, **values)


def resolve_header_path(
    explicit: Optional[str],
    include_dirs: Sequence[str] = (),
    env: Optional[Mapping[str, str]] = None,
) -> tuple[str, tuple[str, ...]]:
    """Resolve the public header and the include directories to use.

    Order: explicit path, ``$V8_SOURCE/include/v8.h`` (its include directory
    is appended to the search path), then the system header.
    """
    environ = os.environ if env is None else env
    dirs = list(include_dirs)
    if explicit:
        return explicit, tuple(dirs)

    source_dir = environ.get(SOURCE_DIR_ENV)
    if source_dir:
        include_dir = os.path.join(source_dir, "include")
        if include_dir not in dirs:
            dirs.append(include_dir)
        logger.info("%s=%s", SOURCE_DIR_ENV, source_dir)
        return os.path.join(include_dir, "v8.h"), tuple(dirs)

    logger.info("%s not set, using %s", SOURCE_DIR_ENV, SYSTEM_HEADER_PATH)
    return SYSTEM_HEADER_PATH, tuple(dirs)

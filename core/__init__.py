"""Core shared configuration, logging and reporting utilities."""

from core.structured_logging import (
    PIPELINE_PHASES,
    configure_structured_logging,
    get_run_id,
    phase_scope,
    resolve_log_level,
    set_run_id,
)
from core.glue_config import (
    ArtifactNames,
    ConfigValidationError,
    GlueConfig,
    MacroConfig,
    apply_overrides,
    load_glue_config,
    resolve_header_path,
    resolve_strict_config,
)
from core.run_artifacts import build_run_report, write_run_report

__all__ = [
    "PIPELINE_PHASES",
    "configure_structured_logging",
    "get_run_id",
    "phase_scope",
    "resolve_log_level",
    "set_run_id",
    "ArtifactNames",
    "ConfigValidationError",
    "GlueConfig",
    "MacroConfig",
    "apply_overrides",
    "load_glue_config",
    "resolve_header_path",
    "resolve_strict_config",
    "build_run_report",
    "write_run_report",
]

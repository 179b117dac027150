#!/usr/bin/env python3
"""
Top-level pipeline orchestrator for C-ABI glue generation.

Parses the engine's public header, assembles the API model, and writes the
three generated artifacts (opaque declaration header, C-ABI prototype header,
C++ implementation). All three texts are rendered before any file is written,
so a failed run never leaves a partial set behind.

Usage:
    python run_pipeline.py --header /path/to/v8/include/v8.h -I /path/to/v8/include
    python run_pipeline.py --config glue.yml --output-dir build/glue
    V8_SOURCE=/path/to/v8 python run_pipeline.py --report-dir output/run_reports
"""

import argparse
import logging
import os
import sys
import time
from typing import Dict, List, Optional, Tuple

from apimodel.api import Api
from apimodel.assembly import AssemblyStats, assemble_api
from core.glue_config import (
    ConfigValidationError,
    GlueConfig,
    apply_overrides,
    load_glue_config,
    resolve_header_path,
    resolve_strict_config,
)
from core.run_artifacts import build_run_report, write_run_report
from core.structured_logging import (
    configure_structured_logging,
    phase_scope,
    resolve_log_level,
    set_run_id,
)
from emitters import EmitOptions, emit_c_header, emit_cc_impl, emit_declaration_header
from extraction.extractor import extract_classes
from extraction.parser import DeclarationTreeError, ParseSession, ParseSessionError

logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by the generation and inspection commands."""
    parser.add_argument(
        "--header",
        default=None,
        help="Public header to parse. Default: config file, then $V8_SOURCE/include/v8.h, "
             "then /usr/include/v8.h"
    )
    parser.add_argument(
        "-I", "--include-dir",
        dest="include_dirs",
        action="append",
        default=None,
        help="Extra include search directory (repeatable, searched in order)."
    )
    parser.add_argument(
        "--namespace",
        default=None,
        help="Target namespace. Default: v8"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML/JSON generation config."
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config(default=False),
        help="Fail on a missing or invalid config file instead of using defaults. "
             "Default: GLUEGEN_STRICT_CONFIG env."
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level name. Default: GLUEGEN_LOG env, then INFO."
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="C-ABI Glue Generation Pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_pipeline.py --header v8/include/v8.h -I v8/include\n"
            "  python run_pipeline.py --config glue.yml --output-dir build/glue\n"
        )
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the generated artifacts. Default: output/glue"
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="If set, write a JSON run report into this directory."
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> GlueConfig:
    """Merge config file, CLI overrides and header path resolution.

    Raises:
        ConfigValidationError: In strict mode, for a bad config file.
    """
    config = load_glue_config(args.config, strict=args.strict_config)
    config = apply_overrides(
        config,
        namespace=args.namespace,
        output_dir=getattr(args, "output_dir", None),
    )
    include_dirs = list(config.include_dirs) + list(args.include_dirs or [])
    header, include_dirs = resolve_header_path(args.header or config.header, include_dirs)
    return apply_overrides(config, header=header, include_dirs=include_dirs)


def extract_api(config: GlueConfig, stats: Optional[AssemblyStats] = None) -> Api:
    """Parse, extract and assemble the API described by ``config``.

    Raises:
        ParseSessionError: If the parse session cannot be established.
        DeclarationTreeError: If the root declaration tree is unusable.
    """
    logger.info(f"Header           : {config.header}")
    logger.info(f"Include dirs     : {list(config.include_dirs)}")
    logger.info(f"Namespace        : {config.namespace}")

    with phase_scope("parse"):
        session = ParseSession(
            config.header,
            config.include_dirs,
            strip_macros=config.macros.strip,
            deprecation_macros=config.macros.deprecated,
        ).open()
    try:
        if stats is not None:
            stats.files_parsed += len(session.files)
            stats.parse_errors += session.error_count
        with phase_scope("extract"):
            raw_classes = extract_classes(session.root, config.namespace, stats)
    finally:
        session.close()

    with phase_scope("assemble"):
        return assemble_api(raw_classes, config.namespace, stats=stats)


def emit_options(config: GlueConfig) -> EmitOptions:
    return EmitOptions(
        namespace=config.namespace,
        context_type=config.context_type,
        declarations_header=config.artifacts.declarations,
        glue_header=config.glue_header,
    )


def render_artifacts(api: Api, config: GlueConfig) -> Dict[str, str]:
    """Render all three artifacts, keyed by artifact kind."""
    options = emit_options(config)
    with phase_scope("emit"):
        return {
            "declarations": emit_declaration_header(api, options),
            "prototypes": emit_c_header(api, options),
            "implementation": emit_cc_impl(api, options),
        }


def write_artifacts(texts: Dict[str, str], config: GlueConfig) -> Dict[str, str]:
    """Write rendered artifacts and return kind -> path."""
    names = {
        "declarations": config.artifacts.declarations,
        "prototypes": config.artifacts.prototypes,
        "implementation": config.artifacts.implementation,
    }
    paths: Dict[str, str] = {}
    with phase_scope("write"):
        os.makedirs(config.output_dir, exist_ok=True)
        for kind, text in texts.items():
            path = os.path.join(config.output_dir, names[kind])
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            paths[kind] = path
            logger.info(f"Wrote {kind:<15}: {path}")
    return paths


def run_generation(config: GlueConfig, stats: AssemblyStats) -> Tuple[Api, Dict[str, str]]:
    """Run the whole pipeline for one config; returns the API and written paths."""
    t0 = time.time()
    api = extract_api(config, stats)
    texts = render_artifacts(api, config)
    paths = write_artifacts(texts, config)
    logger.info(
        "Generation completed in %.2fs: %d classes, %d methods, %d dropped",
        time.time() - t0,
        len(api.classes),
        api.method_count,
        stats.methods_dropped,
    )
    return api, paths


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the pipeline."""
    args = parse_args(argv)
    configure_structured_logging(level=resolve_log_level(args.log_level))
    run_id = set_run_id()

    stats = AssemblyStats()
    header = args.header or "-"
    namespace = args.namespace or "-"
    try:
        config = resolve_config(args)
        header, namespace = config.header, config.namespace
        api, paths = run_generation(config, stats)
        if args.report_dir:
            report = build_run_report(header, namespace, stats, paths, api=api)
            report_path = write_run_report(report, run_id, args.report_dir)
            logger.info("Run report written: %s", report_path)
    except (ConfigValidationError, ParseSessionError, DeclarationTreeError) as e:
        logger.error(f"Generation failed: {e}")
        if args.report_dir:
            report = build_run_report(header, namespace, stats, {}, status="failed", error=str(e))
            write_run_report(report, run_id, args.report_dir)
        sys.exit(1)
    except OSError as e:
        logger.error(f"File error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

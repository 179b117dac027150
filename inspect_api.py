#!/usr/bin/env python3
"""
Print the assembled API model for debugging.

One line per class, followed by indented method lines showing arguments,
return type and, when it differs from the method name, the mangled symbol in
braces.

Usage:
    python inspect_api.py --header /path/to/v8/include/v8.h -I /path/to/v8/include
    python inspect_api.py --stats
"""

import argparse
import logging
import sys
from typing import List, Optional

from apimodel.assembly import AssemblyStats
from core.glue_config import ConfigValidationError
from core.structured_logging import configure_structured_logging, resolve_log_level, set_run_id
from extraction.parser import DeclarationTreeError, ParseSessionError
from run_pipeline import add_common_arguments, extract_api, resolve_config

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the assembled C-ABI API model")
    add_common_arguments(parser)
    parser.add_argument(
        "--stats",
        action="store_true",
        default=False,
        help="Also print extraction/assembly counts and dropped methods."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_structured_logging(level=resolve_log_level(args.log_level, default=logging.WARNING))
    set_run_id()

    stats = AssemblyStats()
    try:
        api = extract_api(resolve_config(args), stats)
    except (ConfigValidationError, ParseSessionError, DeclarationTreeError) as e:
        logger.error(f"Inspection failed: {e}")
        sys.exit(1)

    sys.stdout.write(str(api))
    if args.stats:
        sys.stdout.write(f"{stats}\n")
        for item in stats.dropped:
            sys.stdout.write(f"  dropped {item.class_name}::{item.method} ({item.stage}): {item.reason}\n")


if __name__ == "__main__":
    main()

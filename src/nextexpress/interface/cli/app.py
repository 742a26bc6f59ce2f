from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, option validation,
compilation of the server and entry files, the optional watch loop and
result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from nextexpress.core.pipeline.engine import compile_server, generate_entry_file
from nextexpress.core.pipeline.validator import validate_options
from nextexpress.core.services.watcher import watch
from nextexpress.domain.convention import Convention, default_convention
from nextexpress.domain.errors import CompilerError
from nextexpress.domain.route_models import CompileResult
from nextexpress.infra.logging import LoggingConfig, configure_logging, get_logger, level_from_env
from nextexpress.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 compile failure, 2 bad input,
        130 interrupted).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr)
    log_level = "DEBUG" if args.debug else level_from_env("INFO")
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    logger.debug(f"CLI execution initiated: command={args.command}")

    # 3. Option validation and normalization
    try:
        options, warnings = validate_options(cli_args.args_to_options(args), strict=False)
    except (TypeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    for w in warnings:
        logger.warning(f"Option constraint: {w}")

    # 4. Pre-flight input verification
    src_dir = options["src_dir"]
    if not os.path.isdir(src_dir):
        msg = f"Source directory does not exist: {src_dir}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    convention = default_convention(options["extensions"])

    # 5. Execution phase
    try:
        if args.command == "watch":
            _run_watch(options, convention, json_output=args.json_output)
            return 0

        result = _build(options, convention)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("Interrupted.", file=sys.stderr)
        return 130
    except CompilerError as e:
        logger.error(f"Compilation failed: {e}")
        logger.debug("Compilation failure details", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # 6. Output rendering phase
    _render(result, json_output=args.json_output)
    return 0

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _build(options: Dict[str, Any], convention: Convention) -> CompileResult:
    """Compile the server file, then write the entry file next to it."""
    result = compile_server(
        options["src_dir"],
        options["dist_dir"],
        options["filename"],
        convention=convention,
    )
    generate_entry_file(
        options["port"],
        options["filename"],
        options["entry"],
        options["dist_dir"],
    )
    return result


def _run_watch(options: Dict[str, Any], convention: Convention, *, json_output: bool) -> None:
    paths = options["watch_paths"] or [options["src_dir"]]

    def _on_change() -> None:
        _render(_build(options, convention), json_output=json_output)

    watch(paths, _on_change, interval=options["interval"])

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _render(result: CompileResult, *, json_output: bool) -> None:
    if json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)


def _print_human_summary(result: CompileResult) -> None:
    """Print the compile result as a short terminal report."""
    print(f"Compiled {result.output_path}")
    print(f"Template: {result.template}")
    print(f"Routes: {result.route_count} ({result.handler_count} handlers)")
    if result.sub_routers:
        print(f"Sub-routers: {', '.join(result.sub_routers)}")
    if result.missing_markers:
        print(f"Missing markers: {', '.join(result.missing_markers)}")
    print(f"Elapsed: {result.elapsed_seconds:.3f}s")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())

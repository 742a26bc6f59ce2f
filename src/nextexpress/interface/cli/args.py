from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the ``compile`` and ``watch`` sub-commands with their shared options,
and translates the parsed namespace into a raw options dictionary for
``validate_options``.
"""

import argparse
from typing import Any, Dict, List, Optional

from nextexpress import __version__

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the nextexpress CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="nextexpress",
        description="Compile an app/ directory of route files into an Express server.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    common = argparse.ArgumentParser(add_help=False)

    # --- Path Management ---
    common.add_argument(
        "--src-dir",
        dest="src_dir",
        default=None,
        help="Source root containing app/ (default: src).",
    )
    common.add_argument(
        "--dist-dir",
        dest="dist_dir",
        default=None,
        help="Output directory (default: nexp-compiled).",
    )
    common.add_argument(
        "--server",
        dest="filename",
        default=None,
        help="Generated server filename (default: server.ts).",
    )
    common.add_argument(
        "--entry",
        dest="entry",
        default=None,
        help="Generated entry filename (default: index.ts).",
    )

    # --- Runtime ---
    common.add_argument(
        "-p", "--port",
        dest="port",
        default=None,
        help="Port the entry file listens on (default: 3000).",
    )

    # --- Convention ---
    common.add_argument(
        "--ext",
        dest="extensions",
        default=None,
        help="Comma-separated extension preference order (default: .ts,.js).",
    )

    # --- Diagnostics and Format ---
    common.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    common.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )
    common.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the compile result as JSON.",
    )

    sub = p.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    sub.add_parser(
        "compile",
        parents=[common],
        help="Compile the server file and generate the entry file.",
    )

    watch_p = sub.add_parser(
        "watch",
        parents=[common],
        help="Compile, then recompile on every change.",
    )
    watch_p.add_argument(
        "--watch",
        dest="watch_paths",
        action="append",
        default=None,
        help="Path to watch; repeatable (default: the source dir).",
    )
    watch_p.add_argument(
        "--interval",
        dest="interval",
        type=float,
        default=None,
        help="Polling interval in seconds (default: 0.5).",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_options(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a raw options dictionary.

    Unset arguments map to None so the defaults apply.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Options for ``validate_options``.
    """
    options: Dict[str, Any] = {
        "src_dir": args.src_dir,
        "dist_dir": args.dist_dir,
        "filename": args.filename,
        "entry": args.entry,
        "port": args.port,
        "extensions": _split_csv(args.extensions),
    }

    if args.command == "watch":
        options["watch_paths"] = args.watch_paths
        options["interval"] = args.interval

    return options

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]

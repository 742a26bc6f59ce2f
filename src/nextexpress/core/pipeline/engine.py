from __future__ import annotations

"""
Core compile pipeline.

Coordinates one compile:
1. Builds the immutable convention for this call.
2. Resolves the source tree.
3. Selects the server template (custom-server file or built-in).
4. Compiles the route tree into code fragments.
5. Renders the template and writes the output file atomically.

Everything happens in memory until the final write, so a failure at any step
leaves the destination untouched.
"""

import logging
import os
import time
from typing import Optional

from nextexpress.core.analysis.tree_resolver import get_app_struct
from nextexpress.core.compiler.route_compiler import compile_app_struct
from nextexpress.core.compiler.template_engine import (
    find_missing_markers,
    render_entry,
    render_template,
    select_template,
)
from nextexpress.domain.convention import Convention, default_convention
from nextexpress.domain.errors import OutputWriteError
from nextexpress.domain.route_models import CompileResult
from nextexpress.infra.fs import write_text_atomic

logger = logging.getLogger(__name__)


def compile_server(
        src_dir: str,
        dist_dir: str,
        filename: str,
        *,
        convention: Optional[Convention] = None,
) -> CompileResult:
    """
    Compile the convention tree under ``src_dir`` into ``dist_dir/filename``.

    Idempotent: the same source tree always produces the same bytes.

    Args:
        src_dir: Source root holding ``app/`` and the top-level convention files.
        dist_dir: Output directory, created if missing.
        filename: Name of the generated server file.
        convention: Convention table; the default one when omitted.

    Returns:
        CompileResult: Summary of the generated file.

    Raises:
        CompilerError: Any resolution, analysis, template or write failure.
    """
    started = time.perf_counter()
    logger.info("Starting compilation process")
    logger.debug(f"Parameters: srcDir: {src_dir}, distDir: {dist_dir}, filename: {filename}")

    base_convention = convention or default_convention()
    output_path = os.path.abspath(os.path.join(dist_dir, filename))

    logger.info("Building app structure")
    app_struct = get_app_struct(src_dir, dist_dir, base_convention)

    active = select_template(app_struct, base_convention)
    template_kind = "custom" if app_struct.custom_server else "default"

    logger.info("Compiling app structure to code")
    fragments, stats = compile_app_struct(app_struct, active)

    missing = find_missing_markers(active.server_template)
    if missing:
        logger.warning(
            f"Template is missing marker(s) {', '.join(missing)}; the matching generated code is dropped"
        )
    output = render_template(active.server_template, fragments)

    logger.info(f"Writing output to: {output_path}")
    _write_output(output_path, output)

    elapsed = time.perf_counter() - started
    logger.info("Compilation completed successfully")
    return CompileResult(
        output_path=output_path,
        template=template_kind,
        route_count=stats.route_count,
        handler_count=stats.handler_count,
        sub_routers=list(stats.sub_routers),
        missing_markers=missing,
        elapsed_seconds=elapsed,
    )


def generate_entry_file(
        port: str,
        server_filename: str,
        entry_filename: str,
        dist_dir: str,
) -> str:
    """
    Write the entry module that imports ``createServer`` and listens on ``port``.

    Returns:
        str: Absolute path of the entry file.

    Raises:
        OutputWriteError: If the file cannot be written.
    """
    logger.info("Start generate entry file")
    entry_path = os.path.abspath(os.path.join(dist_dir, entry_filename))
    _write_output(entry_path, render_entry(port, server_filename))
    logger.info("Entry file generated successfully.")
    return entry_path


def _write_output(path: str, content: str) -> None:
    try:
        write_text_atomic(path, content)
    except OSError as e:
        raise OutputWriteError(f"Failed to write '{path}': {e}", path=path) from e

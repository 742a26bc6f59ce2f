from __future__ import annotations

"""
Server Template Engine.

Selects the server template (a user ``custom-server`` file or the built-in
default) and substitutes the five generated fragments into their markers.
"""

import logging
import os
from typing import List, Tuple

from nextexpress.domain import constants as c
from nextexpress.domain.convention import Convention
from nextexpress.domain.errors import TemplateError
from nextexpress.domain.route_models import AppStruct, CompiledFragments
from nextexpress.infra.fs import read_text

logger = logging.getLogger(__name__)

MARKERS: Tuple[str, ...] = (
    c.IMPORTS_MARKER,
    c.SETTINGS_MARKER,
    c.TOP_LEVEL_MIDDLEWARES_MARKER,
    c.ROUTES_MARKER,
    c.TAIL_MIDDLEWARES_MARKER,
)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def select_template(app_struct: AppStruct, convention: Convention) -> Convention:
    """
    Return the convention to render with, carrying the custom template if the
    source root has one.

    The input convention is never modified; a copy is returned instead.

    Raises:
        TemplateError: If the custom-server file exists but cannot be read.
    """
    if not app_struct.custom_server:
        return convention

    template_path = os.path.join(app_struct.src_dir, app_struct.custom_server)
    logger.info(f"Found custom server template at: {template_path}")
    try:
        template = read_text(template_path)
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(
            f"Cannot read custom server template '{template_path}': {e}", path=template_path
        ) from e

    return convention.with_template(template)


def find_missing_markers(template: str) -> List[str]:
    """List the markers that do not appear in ``template``."""
    return [marker for marker in MARKERS if marker not in template]


def render_template(template: str, fragments: CompiledFragments) -> str:
    """
    Replace the first occurrence of each marker with its fragment.

    A marker absent from the template simply drops its fragment.
    """
    logger.debug("Generating final output from template")
    return (
        template
        .replace(c.IMPORTS_MARKER, fragments.imports, 1)
        .replace(c.SETTINGS_MARKER, fragments.settings, 1)
        .replace(c.TOP_LEVEL_MIDDLEWARES_MARKER, fragments.top_level_middlewares, 1)
        .replace(c.ROUTES_MARKER, fragments.routes, 1)
        .replace(c.TAIL_MIDDLEWARES_MARKER, fragments.tail_middlewares, 1)
    )


def render_entry(port: str, server_filename: str) -> str:
    """
    Render the entry module that starts the generated server.

    The server file is imported with its extension; the bundler resolves it.
    """
    return (
        c.ENTRY_TEMPLATE
        .replace(c.ENTRY_SERVER_FILENAME_MARKER, f"./{server_filename}", 1)
        .replace(c.ENTRY_PORT_MARKER, str(port))
    )

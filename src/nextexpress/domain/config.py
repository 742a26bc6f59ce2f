from __future__ import annotations

"""
Compile Options Defaults.

Dictionary-based session options driving the CLI. Values coming from the
command line are merged over these defaults and normalised by
``core.pipeline.validator.validate_options``.
"""

from typing import Any, Dict

from nextexpress.domain import constants as c


def get_default_options() -> Dict[str, Any]:
    """
    Generate the default compile options.

    Returns:
        Dict[str, Any]: Default option values.
    """
    return {
        # IO Paths
        "src_dir": c.DEFAULT_SRC_DIR,
        "dist_dir": c.DEFAULT_DIST_DIR,
        "filename": c.DEFAULT_SERVER_FILENAME,
        "entry": c.DEFAULT_ENTRY_FILENAME,

        # Runtime
        "port": c.DEFAULT_PORT,

        # Convention
        "extensions": list(c.SUPPORTED_EXTENSIONS),

        # Watch loop
        "watch_paths": [],
        "interval": 0.5,
    }

from __future__ import annotations

"""
Domain Constants and Static Data Structures.

The convention table: recognised file basenames and extensions, export names,
template markers, the built-in server and entry templates, and the 405
fallback statement emitted into every generated route handler.
"""

from typing import Tuple

APP_DIR_NAME = "app"
SUPPORTED_EXTENSIONS: Tuple[str, ...] = (".ts", ".js")

# -----------------------------------------------------------------------------
# CONVENTION FILE BASENAMES
# -----------------------------------------------------------------------------
ROUTE_BASENAME = "route"
MIDDLEWARES_BASENAME = "middlewares"
TAIL_MIDDLEWARES_BASENAME = "tail-middlewares"
SETTINGS_BASENAME = "settings"
CUSTOM_SERVER_BASENAME = "custom-server"

# -----------------------------------------------------------------------------
# EXPORT NAMES EXPECTED IN CONVENTION FILES
# -----------------------------------------------------------------------------
SETTINGS_EXPORT_NAME = "settings"
MIDDLEWARES_EXPORT_NAME = "middlewares"
TAIL_MIDDLEWARES_EXPORT_NAME = "middlewares"

METHOD_NOT_ALLOWED_RES = "res.status(405).send(`Method ${req.method} Not Allowed`);"

# -----------------------------------------------------------------------------
# TEMPLATE MARKERS
# -----------------------------------------------------------------------------
IMPORTS_MARKER = "/* __nextExpress_imports__ */"
SETTINGS_MARKER = "/* __nextExpress_settings__ */"
TOP_LEVEL_MIDDLEWARES_MARKER = "/* __nextExpress_topLevelMiddlewares__ */"
ROUTES_MARKER = "/* __nextExpress_routes__ */"
TAIL_MIDDLEWARES_MARKER = "/* __nextExpress_tailMiddlewares__ */"

ENTRY_SERVER_FILENAME_MARKER = "/* __nextExpress_serverFileName__ */"
ENTRY_PORT_MARKER = "/* __nextExpress_port__ */"

SERVER_TEMPLATE = """import express from "express";
/* __nextExpress_imports__ */

export const createServer = () => {
  const app = express();

  /* __nextExpress_settings__ */

  /* __nextExpress_topLevelMiddlewares__ */

  /* __nextExpress_routes__ */

  /* __nextExpress_tailMiddlewares__ */
  return app;
};
"""

ENTRY_TEMPLATE = """import { createServer } from "/* __nextExpress_serverFileName__ */";

const server = createServer();
server.listen(/* __nextExpress_port__ */, () => {
  console.log("Server is listening on port", /* __nextExpress_port__ */);
});
"""

# -----------------------------------------------------------------------------
# CLI DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_SRC_DIR = "src"
DEFAULT_DIST_DIR = "nexp-compiled"
DEFAULT_SERVER_FILENAME = "server.ts"
DEFAULT_ENTRY_FILENAME = "index.ts"
DEFAULT_PORT = "3000"

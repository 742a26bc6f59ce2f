from __future__ import annotations

"""
Route Tree Compiler.

Turns a resolved AppStruct into the five code fragments of the generated
Express server: imports, settings, top-level middlewares, routes (with
sub-routers) and tail middlewares. The traversal is pre-order over
case-insensitively sorted children so the emitted text is byte-for-byte
reproducible.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from nextexpress.core.analysis.export_analyzer import get_endpoint_handlers
from nextexpress.domain.convention import Convention
from nextexpress.domain.errors import VirtualGroupUsageError
from nextexpress.domain.route_models import (
    AppStruct,
    CompiledFragments,
    HandlerDescriptor,
    RouteNode,
    RouteTree,
    SubRouter,
    is_virtual_group,
)

logger = logging.getLogger(__name__)

HandlerAnalyzer = Callable[[str], List[HandlerDescriptor]]

_NON_IDENTIFIER_RX = re.compile(r"[^0-9A-Za-z_$]")
_IDENTIFIER_RX = re.compile(r"^[A-Za-z_$][0-9A-Za-z_$]*$")

ROOT_ROUTER = "app"

# Names bound by the server template or by the top-level imports.
_RESERVED_IDENTIFIERS = frozenset(
    {ROOT_ROUTER, "express", "appSettings", "topLevelMiddlewares", "tailMiddlewares"}
)


@dataclass
class CompileStats:
    """Counters gathered while compiling, reported in the CompileResult."""
    route_count: int = 0
    handler_count: int = 0
    sub_routers: List[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def compile_app_struct(
        app_struct: AppStruct,
        convention: Convention,
        analyze: HandlerAnalyzer = get_endpoint_handlers,
) -> Tuple[CompiledFragments, CompileStats]:
    """
    Compile the application structure into code fragments.

    Assigns ``sub_router`` on every node owning a middlewares file as a side
    effect.

    Args:
        app_struct: Resolved structure (children already sorted).
        convention: Convention table for this compile.
        analyze: Export analyzer, called once per route file.

    Returns:
        Tuple[CompiledFragments, CompileStats]: The fragments and counters.

    Raises:
        RouteParseError: If a route file cannot be parsed.
        VirtualGroupUsageError: If a virtual group would need an identifier.
    """
    logger.info("Starting app structure compilation")

    builder = _FragmentBuilder(app_struct, convention, analyze)
    builder.add_top_level_files()

    logger.info("Traversing application routes")
    for node in app_struct.tree.walk():
        logger.debug(f"Traversing route: {node.name} (children: {len(node.children)})")
        if node.route_file or node.middlewares_file:
            builder.add_route_node(node)

    logger.info("App structure compilation completed")
    return builder.fragments(), builder.stats


def rel_path_to_endpoint(rel_path: str, app_dir_name: str = ROOT_ROUTER) -> str:
    """
    Map the relative path of a route file to its absolute URL.

    The app directory prefix is dropped, virtual-group segments are skipped
    and the route file itself contributes the trailing slash:
    ``app/route.ts`` -> ``/``, ``app/(group)/stats/route.ts`` -> ``/stats/``.

    Raises:
        ValueError: If the path is not inside the app directory.
    """
    prefix = f"{app_dir_name}/"
    if not rel_path.startswith(prefix):
        raise ValueError(f"Invalid route path: {rel_path}")

    segments = rel_path[len(prefix):].split("/")
    endpoint = ""
    for segment in segments[:-1]:
        if is_virtual_group(segment):
            continue
        endpoint += f"/{segment}"
    return endpoint + "/"


def strip_mount_path(endpoint: str, mount_path: str) -> str:
    """Remove a sub-router mount path from the front of ``endpoint``."""
    if endpoint.startswith(mount_path + "/"):
        return endpoint[len(mount_path):]
    return endpoint


def find_nearest_sub_router(tree: RouteTree, node: RouteNode) -> Optional[SubRouter]:
    """Walk parent links upward from ``node`` to the closest assigned sub-router."""
    current: Optional[RouteNode] = node
    while current is not None:
        if current.sub_router is not None:
            return current.sub_router
        current = tree.parent(current)
    return None


def route_name_to_identifier(name: str) -> str:
    """
    Derive a JavaScript identifier base from a directory name.

    Raises:
        VirtualGroupUsageError: For "(group)" names, which never own routers.
    """
    name = name.strip()
    if is_virtual_group(name):
        raise VirtualGroupUsageError(
            f"Virtual group '{name}' should not be used as a route name", path=name
        )
    identifier = _NON_IDENTIFIER_RX.sub("_", name.replace("-", "_"))
    if not identifier or identifier[0].isdigit():
        identifier = f"_{identifier}"
    return identifier


def unique_route_handler_alias(node: RouteNode) -> str:
    """
    Alias prefix for the handlers of a route file, derived from its relative path.

    Distinct directories can share a prefix (`a-b` and `a_b`); the compiler
    de-duplicates the full aliases it emits.
    """
    alias = node.relative_path.replace("(", "").replace(")", "")
    return _NON_IDENTIFIER_RX.sub("_", alias)


# -----------------------------------------------------------------------------
# INTERNAL BUILDER
# -----------------------------------------------------------------------------

class _FragmentBuilder:
    """Accumulates the generated text while the tree is traversed."""

    def __init__(self, app_struct: AppStruct, convention: Convention, analyze: HandlerAnalyzer):
        self.app_struct = app_struct
        self.convention = convention
        self.analyze = analyze
        self.stats = CompileStats()

        self.import_prefix = _import_prefix(app_struct.dist_to_src_rel_path)
        self._used_identifiers: Set[str] = set(_RESERVED_IDENTIFIERS)

        self.imports: List[str] = []
        self.settings: List[str] = []
        self.top_level_middlewares: List[str] = []
        self.routes: List[str] = []
        self.tail_middlewares: List[str] = []

    def fragments(self) -> CompiledFragments:
        return CompiledFragments(
            imports="".join(self.imports),
            settings="".join(self.settings),
            top_level_middlewares="".join(self.top_level_middlewares),
            routes="".join(self.routes),
            tail_middlewares="".join(self.tail_middlewares),
        )

    # -- top-level convention files -------------------------------------------

    def add_top_level_files(self) -> None:
        cv = self.convention
        app = self.app_struct

        # Expects `export const settings = [{ name, value }]`, applied with app.set()
        if app.settings:
            logger.debug(f"Adding settings import from: {app.settings}")
            self._add_import(cv.settings_export_name, "appSettings", app.settings)
            self.settings.append(
                "for (const setting of appSettings) {\n"
                "      app.set(setting.name, setting.value);\n"
                "    }\n"
            )

        if app.top_level_middlewares:
            logger.debug(f"Adding top-level middlewares import from: {app.top_level_middlewares}")
            self._add_import(cv.middlewares_export_name, "topLevelMiddlewares", app.top_level_middlewares)
            self.top_level_middlewares.append(f"{ROOT_ROUTER}.use(...topLevelMiddlewares);\n")

        if app.tail_middlewares:
            logger.debug(f"Adding tail-middlewares import from: {app.tail_middlewares}")
            self._add_import(cv.tail_middlewares_export_name, "tailMiddlewares", app.tail_middlewares)
            self.tail_middlewares.append(f"{ROOT_ROUTER}.use(...tailMiddlewares);\n")

    # -- route nodes ------------------------------------------------------------

    def add_route_node(self, node: RouteNode) -> None:
        logger.debug(f"Compiling route: {node.name} at {node.relative_path}")
        self.routes.append(f"// ===== routes [{node.name} | {node.relative_path}] =====\n")

        if node.middlewares_file:
            self._add_sub_router(node)

        if node.route_file:
            self._add_endpoint(node)

        self.routes.append("\n")

    def _add_sub_router(self, node: RouteNode) -> None:
        logger.debug(f"Setting up middleware router for: {node.name}")
        mount_path = f"/{node.name}"
        identifier = self._unique_identifier(
            route_name_to_identifier(node.name), derived=("Router", "Middlewares")
        )
        middlewares_alias = f"{identifier}Middlewares"
        router_identifier = f"{identifier}Router"

        self._add_import(
            self.convention.middlewares_export_name,
            middlewares_alias,
            f"{node.relative_path}/{node.middlewares_file}",
        )
        self.routes.append(f"const {router_identifier} = express.Router();\n")
        self.routes.append(f'{ROOT_ROUTER}.use("{mount_path}", {router_identifier});\n')
        self.routes.append(f"{router_identifier}.use(...{middlewares_alias});\n")

        node.sub_router = SubRouter(identifier=router_identifier, mount_path=mount_path)
        self.stats.sub_routers.append(mount_path)

    def _add_endpoint(self, node: RouteNode) -> None:
        logger.debug(f"Processing route handlers for: {node.name}")
        route_rel_path = f"{node.relative_path}/{node.route_file}"

        endpoint = rel_path_to_endpoint(route_rel_path, self.convention.app_dir_name)
        sub_router = find_nearest_sub_router(self.app_struct.tree, node)
        if sub_router is not None:
            endpoint = strip_mount_path(endpoint, sub_router.mount_path)
        logger.debug(f"Mapped endpoint URI: {endpoint} for route: {node.name}")

        handlers = self.analyze(os.path.join(self.app_struct.src_dir, *route_rel_path.split("/")))
        if not handlers:
            logger.warning(f"No exported handlers found in {route_rel_path}; every method will get 405")

        alias_prefix = unique_route_handler_alias(node)
        inner = ""
        for handler in handlers:
            alias = self._unique_identifier(
                f"{alias_prefix}_{_NON_IDENTIFIER_RX.sub('_', handler.export_name)}"
            )
            self._add_import(handler.export_name, alias, route_rel_path)
            awaited = "await " if handler.is_async else ""
            inner += (
                f'if (req.method === "{handler.export_name}") '
                f"{{ {awaited}{alias}(req, res); return; }}\n"
            )

        router = sub_router.identifier if sub_router is not None else ROOT_ROUTER
        self.routes.append(
            f'{router}.all("{endpoint}", async (req, res) => {{ '
            f"{inner} {self.convention.method_not_allowed_res}}});\n"
        )
        self.stats.route_count += 1
        self.stats.handler_count += len(handlers)

    # -- helpers ----------------------------------------------------------------

    def _add_import(self, export_name: str, alias: str, rel_file: str) -> None:
        binding = export_name if _IDENTIFIER_RX.match(export_name) else f'"{export_name}"'
        specifier = f"{self.import_prefix}/{self.convention.strip_extension(rel_file)}"
        self.imports.append(f'import {{ {binding} as {alias} }} from "{specifier}";\n')

    def _unique_identifier(self, base: str, derived: Tuple[str, ...] = ("",)) -> str:
        """
        Reserve `base` (suffixed `_2`, `_3`, ... on collision) so that every
        `<candidate><ending>` name in `derived` is unused in this module.
        """
        candidate = base
        suffix = 2
        while any(f"{candidate}{ending}" in self._used_identifiers for ending in derived):
            candidate = f"{base}_{suffix}"
            suffix += 1
        self._used_identifiers.update(f"{candidate}{ending}" for ending in derived)
        return candidate


def _import_prefix(dist_to_src_rel_path: str) -> str:
    """Make sure the import prefix is a relative specifier, never a bare one."""
    if dist_to_src_rel_path.startswith((".", "/")):
        return dist_to_src_rel_path
    return f"./{dist_to_src_rel_path}"

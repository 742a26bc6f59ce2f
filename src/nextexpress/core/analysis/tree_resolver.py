from __future__ import annotations

"""
Route Tree Resolver.

Walks the source directory once and mirrors the ``app/`` subtree into a
RouteTree, recording route and middlewares files per directory as well as the
top-level convention files (middlewares, tail-middlewares, settings,
custom-server) found directly under the source root.
"""

import logging
import os
from typing import Dict, List, Optional

from nextexpress.domain.convention import Convention
from nextexpress.domain.errors import ResolutionError
from nextexpress.domain.route_models import AppStruct, RouteNode, RouteTree
from nextexpress.infra.fs import posix_relpath, to_posix

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def get_app_struct(src_dir: str, dist_dir: str, convention: Convention) -> AppStruct:
    """
    Resolve the on-disk convention under ``src_dir`` into an AppStruct.

    The returned tree has its children sorted case-insensitively at every
    level and parent links populated.

    Args:
        src_dir: Source root to scan.
        dist_dir: Destination directory of the generated file; only used to
            compute the import prefix back to the sources.
        convention: Convention table for this compile.

    Returns:
        AppStruct: The resolved application structure.

    Raises:
        ResolutionError: If the source root is missing or cannot be read.
    """
    src_path = os.path.abspath(src_dir)
    dist_path = os.path.abspath(dist_dir)

    logger.debug(f"Starting to analyze app structure from srcDir: {src_path}")

    if not os.path.isdir(src_path):
        raise ResolutionError(f"Source directory does not exist: {src_path}", path=src_path)

    app_struct = AppStruct(
        src_dir=src_path,
        dist_dir=dist_path,
        dist_to_src_rel_path=posix_relpath(src_path, dist_path),
        tree=RouteTree(convention.app_dir_name),
    )

    logger.info(f"Scanning directory structure in: {src_path}")
    _scan(src_path, app_struct, convention)

    if not os.path.isdir(os.path.join(src_path, convention.app_dir_name)):
        logger.warning(
            f"No '{convention.app_dir_name}' directory found in {src_path}; no routes will be generated"
        )

    app_struct.tree.sort_children()
    app_struct.tree.link_parents()

    logger.info(
        f"Directory scan completed: {app_struct.dir_count} directories, "
        f"{app_struct.file_count} files processed"
    )
    return app_struct


# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _scan(src_path: str, app_struct: AppStruct, convention: Convention) -> None:
    """Depth-first walk filling ``app_struct`` in place."""
    tree = app_struct.tree
    app_dir = convention.app_dir_name
    nodes_by_path: Dict[str, RouteNode] = {app_dir: tree.root}

    def _on_error(err: OSError) -> None:
        raise ResolutionError(
            f"Cannot read directory '{err.filename}': {err.strerror}",
            path=str(err.filename or src_path),
        ) from err

    for root, dirs, files in os.walk(src_path, onerror=_on_error):
        dirs.sort()
        files.sort()

        rel_root = to_posix(os.path.relpath(root, src_path))
        if rel_root == ".":
            rel_root = ""

        app_struct.file_count += len(files)
        for file_name in files:
            logger.debug(f"Processing file: {_join(rel_root, file_name)}")

        if not rel_root:
            # Only the route tree is worth descending into
            dirs[:] = [d for d in dirs if d == app_dir]
            app_struct.dir_count += len(dirs)
            _resolve_top_level_files(files, app_struct, convention)
            continue

        node = nodes_by_path.get(rel_root)
        if node is None:
            continue

        for dir_name in dirs:
            child_rel = _join(rel_root, dir_name)
            logger.debug(f"Found directory: {child_rel}")
            nodes_by_path[child_rel] = tree.add_child(node, dir_name, child_rel)
        app_struct.dir_count += len(dirs)

        _resolve_node_files(node, files, convention)


def _resolve_top_level_files(files: List[str], app_struct: AppStruct, convention: Convention) -> None:
    """Record the convention files living directly under the source root."""
    app_struct.top_level_middlewares = convention.match(convention.middlewares_basename, files)
    if app_struct.top_level_middlewares:
        logger.info(f"Found top-level middleware file: {app_struct.top_level_middlewares}")

    app_struct.tail_middlewares = convention.match(convention.tail_middlewares_basename, files)
    if app_struct.tail_middlewares:
        logger.info(f"Found tail middlewares file: {app_struct.tail_middlewares}")

    app_struct.settings = convention.match(convention.settings_basename, files)
    if app_struct.settings:
        logger.info(f"Found settings file: {app_struct.settings}")

    app_struct.custom_server = convention.match(convention.custom_server_basename, files)
    if app_struct.custom_server:
        logger.info(f"Found custom server file: {app_struct.custom_server}")


def _resolve_node_files(node: RouteNode, files: List[str], convention: Convention) -> None:
    """Attach the route and middlewares files of one app directory."""
    # Files placed literally inside a virtual group are ignored
    if node.is_virtual_group:
        if files:
            logger.debug(f"Skipping {len(files)} file(s) inside virtual group: {node.relative_path}")
        return

    node.route_file = convention.match(convention.route_basename, files)
    if node.route_file:
        logger.info(f"Found route file: {node.relative_path}/{node.route_file}")

    node.middlewares_file = convention.match(convention.middlewares_basename, files)
    if node.middlewares_file:
        logger.info(f"Found middleware file: {node.relative_path}/{node.middlewares_file}")


def _join(rel_root: Optional[str], name: str) -> str:
    return f"{rel_root}/{name}" if rel_root else name

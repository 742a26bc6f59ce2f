from __future__ import annotations

"""
Route Tree Data Models.

Structures shared by the resolver, the export analyzer and the route compiler.
RouteNodes live in an arena (``RouteTree.nodes``); a node refers to its parent
by index so upward lookups never need back-pointers.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

# -----------------------------------------------------------------------------
# VALUE OBJECTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class HandlerDescriptor:
    """
    One dispatchable handler exported by a route file.

    Attributes:
        export_name: Exported binding name, used verbatim as the method key.
        is_async: Whether the declaration itself is asynchronous.
    """
    export_name: str
    is_async: bool


@dataclass(frozen=True)
class SubRouter:
    """
    Router generated for a directory owning a middlewares file.

    Attributes:
        identifier: Variable name of the router in the generated code.
        mount_path: Single-segment path the router is mounted at ("/" + name).
    """
    identifier: str
    mount_path: str


@dataclass(frozen=True)
class CompiledFragments:
    """The five code fragments substituted into the server template."""
    imports: str = ""
    settings: str = ""
    top_level_middlewares: str = ""
    routes: str = ""
    tail_middlewares: str = ""


# -----------------------------------------------------------------------------
# ROUTE TREE
# -----------------------------------------------------------------------------

@dataclass
class RouteNode:
    """
    One directory of the ``app/`` subtree (or the synthetic ``app`` root).

    Attributes:
        node_id: Position of this node in the owning RouteTree arena.
        name: Directory segment name, possibly a virtual group "(name)".
        relative_path: POSIX path from the source root to this directory.
        route_file: Basename of the terminal route file, if any.
        middlewares_file: Basename of the scoped middlewares file, if any.
        children: Child nodes, sorted case-insensitively once resolved.
        parent_id: Arena index of the parent; None for the root.
        sub_router: Assigned by the compiler for nodes with a middlewares file.
    """
    node_id: int
    name: str
    relative_path: str
    route_file: Optional[str] = None
    middlewares_file: Optional[str] = None
    children: List["RouteNode"] = field(default_factory=list)
    parent_id: Optional[int] = None
    sub_router: Optional[SubRouter] = None

    @property
    def is_virtual_group(self) -> bool:
        return is_virtual_group(self.name)


class RouteTree:
    """Arena owning every RouteNode of one resolution."""

    def __init__(self, root_name: str):
        self.nodes: List[RouteNode] = []
        self.root = self.new_node(root_name, root_name)

    def new_node(self, name: str, relative_path: str) -> RouteNode:
        node = RouteNode(node_id=len(self.nodes), name=name, relative_path=relative_path)
        self.nodes.append(node)
        return node

    def add_child(self, parent: RouteNode, name: str, relative_path: str) -> RouteNode:
        child = self.new_node(name, relative_path)
        parent.children.append(child)
        return child

    def parent(self, node: RouteNode) -> Optional[RouteNode]:
        if node.parent_id is None:
            return None
        return self.nodes[node.parent_id]

    def link_parents(self) -> None:
        """Populate ``parent_id`` for every node from the children lists."""
        for node in self.walk():
            for child in node.children:
                child.parent_id = node.node_id

    def sort_children(self) -> None:
        """Order siblings case-insensitively by name at every level."""
        for node in self.walk():
            node.children.sort(key=lambda child: child.name.lower())

    def walk(self) -> Iterator[RouteNode]:
        """Pre-order traversal: a node before its children, children in order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass
class AppStruct:
    """
    Result of resolving one source directory.

    Attributes:
        src_dir: Absolute source root.
        dist_dir: Absolute destination directory.
        dist_to_src_rel_path: POSIX path from dist_dir to src_dir, prefix of
            every generated import specifier.
        tree: The route tree rooted at the ``app`` node.
        top_level_middlewares: Filename of the root middlewares file.
        tail_middlewares: Filename of the root tail-middlewares file.
        settings: Filename of the root settings file.
        custom_server: Filename of the root custom-server template.
        dir_count: Directories visited during the scan.
        file_count: Files visited during the scan.
    """
    src_dir: str
    dist_dir: str
    dist_to_src_rel_path: str
    tree: RouteTree
    top_level_middlewares: Optional[str] = None
    tail_middlewares: Optional[str] = None
    settings: Optional[str] = None
    custom_server: Optional[str] = None
    dir_count: int = 0
    file_count: int = 0

    @property
    def app(self) -> RouteNode:
        return self.tree.root


@dataclass(frozen=True)
class CompileResult:
    """
    Summary of one successful compile.

    Attributes:
        output_path: Absolute path of the generated server file.
        template: "custom" when a custom-server file was used, else "default".
        route_count: Number of route files compiled.
        handler_count: Number of handler branches emitted.
        sub_routers: Mount paths of the generated sub-routers, in emit order.
        missing_markers: Markers absent from the template (custom templates only).
        elapsed_seconds: Wall time spent in the compile.
    """
    output_path: str
    template: str
    route_count: int
    handler_count: int
    sub_routers: List[str] = field(default_factory=list)
    missing_markers: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0


def is_virtual_group(name: str) -> bool:
    """True for directory names wrapped in parentheses, e.g. "(admin)"."""
    return name.startswith("(") and name.endswith(")")

from __future__ import annotations

"""
Route File Export Analysis.

Parses TypeScript/JavaScript route files with tree-sitter and reports the
exported top-level callables (function declarations and variables initialised
with a function or arrow function) together with their async flag. Nothing is
executed or type-checked; every qualifying export becomes a handler keyed by
its exported name.

JavaScript files may contain JSX, so they are parsed with the TSX grammar.
"""

import logging
import os
from typing import Dict, Iterator, List, Optional

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from nextexpress.domain.errors import RouteParseError
from nextexpress.domain.route_models import HandlerDescriptor

logger = logging.getLogger(__name__)

_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
# "function" is the name older grammar releases use for function expressions
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}

# Files parsed with the TSX grammar; everything else uses plain TypeScript.
_TSX_EXTENSIONS = {".js", ".jsx", ".tsx"}

_parsers: Dict[str, Parser] = {}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def get_endpoint_handlers(file_path: str) -> List[HandlerDescriptor]:
    """
    Discover the exported handlers of a route file.

    Args:
        file_path: Absolute path to the route file.

    Returns:
        List[HandlerDescriptor]: One entry per exported callable, in source
        order, without duplicate export names. Callers must not rely on the
        order.

    Raises:
        RouteParseError: If the file cannot be read or contains syntax errors.
    """
    logger.debug(f"Parsing endpoint handlers from: {file_path}")

    try:
        with open(file_path, "rb") as f:
            source = f.read()
        source.decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RouteParseError(
            f"Could not read route file '{file_path}': {e}", path=file_path
        ) from e

    tree = _get_parser(file_path).parse(source)
    root = tree.root_node

    if root.has_error:
        row, column = _first_error_position(root)
        raise RouteParseError(
            f"Syntax error in '{file_path}' at line {row + 1}, column {column + 1}",
            path=file_path,
        )

    handlers = extract_handlers(root)

    logger.debug(f"Found {len(handlers)} endpoint handlers in {os.path.basename(file_path)}")
    for handler in handlers:
        logger.debug(f"  - {handler.export_name} (async: {handler.is_async})")

    return handlers


def extract_handlers(program: Node) -> List[HandlerDescriptor]:
    """
    Collect handler descriptors from a parsed ``program`` node.

    Handles direct exports (``export function``, ``export const X = () =>``),
    default function exports and local export clauses
    (``export { impl as GET }``). Re-exports from other modules are ignored.
    """
    local_callables = _collect_local_callables(program)
    results: Dict[str, HandlerDescriptor] = {}

    for statement in program.named_children:
        if statement.type != "export_statement":
            continue

        declaration = statement.child_by_field_name("declaration")
        value = statement.child_by_field_name("value")
        is_default = any(child.type == "default" for child in statement.children)

        if declaration is not None:
            for name, is_async in _callables_of(declaration):
                export_name = "default" if is_default else name
                results.setdefault(export_name, HandlerDescriptor(export_name, is_async))
            continue

        if value is not None:
            # Only anonymous function expressions count as default declarations
            if is_default and value.type in _FUNCTION_VALUES - {"arrow_function"}:
                results.setdefault("default", HandlerDescriptor("default", _is_async(value)))
            continue

        if statement.child_by_field_name("source") is not None:
            continue

        for clause in statement.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                local = _text(specifier.child_by_field_name("name"))
                alias = specifier.child_by_field_name("alias")
                export_name = _text(alias) if alias is not None else local
                if local in local_callables:
                    results.setdefault(
                        export_name, HandlerDescriptor(export_name, local_callables[local])
                    )

    return list(results.values())


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _get_parser(file_path: str) -> Parser:
    """Lazily build one shared tree-sitter parser per grammar."""
    grammar = "tsx" if os.path.splitext(file_path)[1].lower() in _TSX_EXTENSIONS else "typescript"
    parser = _parsers.get(grammar)
    if parser is None:
        language = tstypescript.language_tsx() if grammar == "tsx" else tstypescript.language_typescript()
        parser = Parser(Language(language))
        _parsers[grammar] = parser
    return parser


def _collect_local_callables(program: Node) -> Dict[str, bool]:
    """Map every top-level callable binding name to its async flag."""
    found: Dict[str, bool] = {}
    for statement in program.named_children:
        declaration = statement
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name("declaration")
            if declaration is None:
                continue
        for name, is_async in _callables_of(declaration):
            found.setdefault(name, is_async)
    return found


def _callables_of(declaration: Node) -> Iterator[tuple]:
    """Yield ``(name, is_async)`` for callables introduced by a declaration."""
    if declaration.type in _FUNCTION_DECLARATIONS:
        name = declaration.child_by_field_name("name")
        yield (_text(name) if name is not None else "default"), _is_async(declaration)
        return

    if declaration.type in _VARIABLE_DECLARATIONS:
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            # Destructuring patterns never bind a single callable
            if name is None or name.type != "identifier":
                continue
            if value is not None and value.type in _FUNCTION_VALUES:
                yield _text(name), _is_async(value)


def _is_async(node: Node) -> bool:
    return any(child.type == "async" for child in node.children)


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    text = node.text.decode("utf-8")
    # export { impl as "GET" } uses a string literal as the exported name
    if node.type == "string":
        return text[1:-1]
    return text


def _first_error_position(root: Node) -> tuple:
    """Locate the first ERROR or MISSING node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0], node.start_point[1]
        if node.has_error:
            stack.extend(reversed(node.children))
    return root.start_point[0], root.start_point[1]

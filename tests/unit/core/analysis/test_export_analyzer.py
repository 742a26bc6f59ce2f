from __future__ import annotations

"""
Unit tests for the route file Export Analyzer.

Verifies which top-level exports are recognised as handlers, that the async
flag follows the declaration, and that unreadable or malformed files raise
RouteParseError.
"""

from pathlib import Path
from typing import Dict

import pytest

from nextexpress.core.analysis.export_analyzer import get_endpoint_handlers
from nextexpress.domain.errors import CompilerError, RouteParseError


def _handlers(tmp_path: Path, source: str, name: str = "route.ts") -> Dict[str, bool]:
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return {h.export_name: h.is_async for h in get_endpoint_handlers(str(path))}


# -----------------------------------------------------------------------------
# Recognised export forms
# -----------------------------------------------------------------------------

def test_function_declarations(tmp_path: Path) -> None:
    """Plain and async function declarations keep their own async flag."""
    src = (
        "export function GET(req, res) { res.send('ok'); }\n"
        "export async function POST(req, res) { await save(req.body); }\n"
    )
    assert _handlers(tmp_path, src) == {"GET": False, "POST": True}


def test_arrow_and_function_expressions(tmp_path: Path) -> None:
    """Variables initialised with arrows or function expressions count."""
    src = (
        "export const GET = (req, res) => res.send('ok');\n"
        "export const PUT = async (req, res) => { await update(req); };\n"
        "export let PATCH = function (req, res) { res.end(); };\n"
        "export var DELETE = async function (req, res) { res.end(); };\n"
    )
    assert _handlers(tmp_path, src) == {
        "GET": False,
        "PUT": True,
        "PATCH": False,
        "DELETE": True,
    }


def test_type_annotated_declarations(tmp_path: Path) -> None:
    """Type annotations on the binding or the parameters are transparent."""
    src = (
        "import type { Request, Response } from 'express';\n"
        "type Handler = (req: Request, res: Response) => Promise<void>;\n"
        "export const GET: Handler = async (req: Request, res: Response) => {\n"
        "  res.json({ ok: true });\n"
        "};\n"
        "export function POST(req: Request, res: Response): void {\n"
        "  res.status(201).end();\n"
        "}\n"
    )
    assert _handlers(tmp_path, src) == {"GET": True, "POST": False}


def test_multiple_declarators_in_one_statement(tmp_path: Path) -> None:
    """Every function-valued declarator of one export statement is a handler."""
    src = "export const GET = () => {}, HEAD = async () => {}, LIMIT = 10;\n"
    assert _handlers(tmp_path, src) == {"GET": False, "HEAD": True}


def test_local_export_clause_with_alias(tmp_path: Path) -> None:
    """``export { impl as GET }`` resolves to the local declaration."""
    src = (
        "async function listUsers(req, res) { res.json(await db.all()); }\n"
        "const createUser = (req, res) => res.status(201).end();\n"
        "export { listUsers as GET, createUser as POST };\n"
    )
    assert _handlers(tmp_path, src) == {"GET": True, "POST": False}


def test_default_function_export(tmp_path: Path) -> None:
    """A default-exported function is reported under the name 'default'."""
    src = "export default async function handler(req, res) { res.end(); }\n"
    assert _handlers(tmp_path, src) == {"default": True}


def test_javascript_file(tmp_path: Path) -> None:
    """.js route files are discovered like .ts ones."""
    src = "export async function GET(req, res) { res.send('js'); }\n"
    assert _handlers(tmp_path, src, name="route.js") == {"GET": True}


def test_javascript_file_with_jsx(tmp_path: Path) -> None:
    """JSX in a .js route file is valid syntax."""
    src = (
        "const View = () => { return <div className=\"page\"/>; };\n"
        "export function GET(req, res) { res.send(render(<View />)); }\n"
    )
    assert _handlers(tmp_path, src, name="route.js") == {"GET": False}


def test_typescript_file_keeps_angle_bracket_casts(tmp_path: Path) -> None:
    """.ts files still use the TypeScript grammar, where <T>expr is a cast."""
    src = "export const GET = (req, res) => { const n = <number>req.body; res.send(n); };\n"
    assert _handlers(tmp_path, src) == {"GET": False}


# -----------------------------------------------------------------------------
# Ignored exports
# -----------------------------------------------------------------------------

def test_non_function_exports_are_ignored(tmp_path: Path) -> None:
    """Constants, classes, types and interfaces are not handlers."""
    src = (
        "export const PORT = 3000;\n"
        "export const config = { cache: true };\n"
        "export class Controller {}\n"
        "export interface Payload { id: string }\n"
        "export type Id = string;\n"
        "export function GET(req, res) { res.end(); }\n"
    )
    assert _handlers(tmp_path, src) == {"GET": False}


def test_reexports_and_private_functions_are_ignored(tmp_path: Path) -> None:
    """Re-exports from other modules and non-exported functions never count."""
    src = (
        "export { GET } from './shared';\n"
        "export * from './more';\n"
        "function POST(req, res) { res.end(); }\n"
    )
    assert _handlers(tmp_path, src) == {}


def test_duplicate_export_names_keep_first(tmp_path: Path) -> None:
    """The first occurrence of an export name wins."""
    src = (
        "async function impl(req, res) {}\n"
        "export function GET(req, res) {}\n"
        "export { impl as GET };\n"
    )
    assert _handlers(tmp_path, src) == {"GET": False}


def test_empty_file_has_no_handlers(tmp_path: Path) -> None:
    assert _handlers(tmp_path, "") == {}


# -----------------------------------------------------------------------------
# Failures
# -----------------------------------------------------------------------------

def test_syntax_error_raises_route_parse_error(tmp_path: Path) -> None:
    """A malformed file names the file and a 1-based line in the error."""
    path = tmp_path / "route.ts"
    path.write_text("export function GET(req, res {\n  res.send('x');\n", encoding="utf-8")

    with pytest.raises(RouteParseError) as exc_info:
        get_endpoint_handlers(str(path))

    assert exc_info.value.path == str(path)
    assert "line" in str(exc_info.value)


def test_missing_file_raises_route_parse_error(tmp_path: Path) -> None:
    """Read failures are reported as RouteParseError with the OSError chained."""
    missing = tmp_path / "nope" / "route.ts"

    with pytest.raises(RouteParseError) as exc_info:
        get_endpoint_handlers(str(missing))

    assert isinstance(exc_info.value.__cause__, OSError)
    assert isinstance(exc_info.value, CompilerError)


def test_invalid_utf8_raises_route_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "route.ts"
    path.write_bytes(b"export function GET() {}\n\xff\xfe\n")

    with pytest.raises(RouteParseError):
        get_endpoint_handlers(str(path))

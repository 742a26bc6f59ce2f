from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A ``make_tree`` fixture that materialises source trees on disk.
"""

import os
import sys
from pathlib import Path
from typing import Callable, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """
    Return a factory writing ``{relative path: content}`` under ``tmp_path/src``.

    Paths use forward slashes. A trailing slash creates an empty directory.

    Returns:
        Callable: Factory returning the created source root.
    """
    def _make(files: Dict[str, str]) -> Path:
        root = tmp_path / "src"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            target = root.joinpath(*rel.rstrip("/").split("/"))
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def sample_files() -> Dict[str, str]:
    """
    A small but complete application tree.

    Structure:
    src/
      app/route.ts           GET
      app/user/route.ts      GET, async POST
      middlewares.ts
      tail-middlewares.ts
    """
    return {
        "app/route.ts": "export function GET(req, res) { res.send('home'); }\n",
        "app/user/route.ts": (
            "export const GET = (req, res) => { res.json([]); };\n"
            "export async function POST(req, res) { res.status(201).end(); }\n"
        ),
        "middlewares.ts": "export const middlewares = [];\n",
        "tail-middlewares.ts": "export const middlewares = [];\n",
    }

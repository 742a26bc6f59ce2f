from __future__ import annotations

from nextexpress.core.pipeline.engine import compile_server, generate_entry_file
from nextexpress.domain.convention import Convention, default_convention

__version__ = "0.1.0"

__all__ = [
    "Convention",
    "compile_server",
    "default_convention",
    "generate_entry_file",
]

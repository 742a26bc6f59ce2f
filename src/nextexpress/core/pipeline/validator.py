from __future__ import annotations

"""
Compile Options Validation Service.

Normalises raw option dictionaries (usually built from CLI arguments) before
they reach the pipeline: fills defaults, coerces types, checks the port range
and fixes extension spelling. Problems are either collected as warnings or,
in strict mode, raised.
"""

import logging
from typing import Any, Dict, List, Tuple

from nextexpress.domain.config import get_default_options

logger = logging.getLogger(__name__)

_STRING_FIELDS = ("src_dir", "dist_dir", "filename", "entry")
_LIST_FIELDS = ("extensions", "watch_paths")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_options(
        options: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a compile options dictionary.

    Args:
        options: Raw options (usually a dictionary).
        strict: If True, raise on invalid values instead of falling back.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized options and warnings.

    Raises:
        TypeError: In strict mode, for values of the wrong type.
        ValueError: In strict mode, for out-of-range values.
    """
    warnings: List[str] = []
    defaults = get_default_options()

    if not isinstance(options, dict):
        msg = f"Invalid options type: expected dict, received {type(options).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in options.items() if v is not None})

    for name in _STRING_FIELDS:
        merged[name] = _as_str(merged.get(name), defaults[name], name, warnings, strict)

    for name in _LIST_FIELDS:
        merged[name] = _as_list_str(merged.get(name), defaults[name], name, warnings, strict)

    merged["port"] = _as_port(merged.get("port"), defaults["port"], warnings, strict)
    merged["interval"] = _as_interval(merged.get("interval"), defaults["interval"], warnings, strict)
    merged["extensions"] = _normalize_extensions(
        merged["extensions"], defaults["extensions"], warnings, strict
    )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Accept a list of strings or, outside strict mode, a CSV string."""
    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        return items if items else list(fallback)

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
            elif not isinstance(item, str):
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out if out or not fallback else list(fallback)

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_port(value: Any, fallback: str, warnings: List[str], strict: bool) -> str:
    """Ports are kept as strings since they are pasted verbatim into JS."""
    try:
        port = int(str(value).strip())
    except ValueError:
        port = -1

    if 0 < port < 65536:
        return str(port)

    msg = f"Invalid port '{value}': expected an integer between 1 and 65535."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using {fallback}.")
    return fallback


def _as_interval(value: Any, fallback: float, warnings: List[str], strict: bool) -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError):
        interval = -1.0

    if interval > 0:
        return interval

    msg = f"Invalid interval '{value}': expected a positive number of seconds."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using {fallback}.")
    return fallback


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_extensions(exts: List[str], fallback: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Prefix extensions with a dot and drop duplicates, keeping order."""
    out: List[str] = []
    for ext in exts:
        e = ext.strip()
        if not e:
            continue
        if not e.startswith("."):
            if strict:
                raise ValueError(f"Invalid extension '{ext}': must start with '.'.")
            warnings.append(f"Extension '{ext}' corrected to '.{e}'.")
            e = "." + e
        if e not in out:
            out.append(e)
    return out if out else list(fallback)

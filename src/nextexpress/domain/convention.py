from __future__ import annotations

"""
Convention Configuration Model.

A frozen value holding everything the resolver, compiler and template engine
need to know about the on-disk convention. One instance is built per compile
call and passed explicitly to every component.
"""

import dataclasses
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from nextexpress.domain import constants as c


@dataclass(frozen=True)
class Convention:
    """
    Immutable convention table for one compile invocation.

    Attributes:
        app_dir_name: Name of the route tree root directory under the source root.
        extensions: Extension preference order; the first match wins.
        route_basename: Basename of terminal route files.
        middlewares_basename: Basename of scoped and top-level middleware files.
        tail_middlewares_basename: Basename of the tail middleware file.
        settings_basename: Basename of the settings file.
        custom_server_basename: Basename of the user-supplied server template.
        settings_export_name: Export expected in the settings file.
        middlewares_export_name: Export expected in middleware files.
        tail_middlewares_export_name: Export expected in the tail middleware file.
        method_not_allowed_res: Statement closing every generated route handler.
        server_template: Template text holding the five markers.
    """
    app_dir_name: str = c.APP_DIR_NAME
    extensions: Tuple[str, ...] = c.SUPPORTED_EXTENSIONS

    route_basename: str = c.ROUTE_BASENAME
    middlewares_basename: str = c.MIDDLEWARES_BASENAME
    tail_middlewares_basename: str = c.TAIL_MIDDLEWARES_BASENAME
    settings_basename: str = c.SETTINGS_BASENAME
    custom_server_basename: str = c.CUSTOM_SERVER_BASENAME

    settings_export_name: str = c.SETTINGS_EXPORT_NAME
    middlewares_export_name: str = c.MIDDLEWARES_EXPORT_NAME
    tail_middlewares_export_name: str = c.TAIL_MIDDLEWARES_EXPORT_NAME

    method_not_allowed_res: str = c.METHOD_NOT_ALLOWED_RES
    server_template: str = c.SERVER_TEMPLATE

    def filenames(self, basename: str) -> Tuple[str, ...]:
        """All accepted filenames for ``basename``, in preference order."""
        return tuple(f"{basename}{ext}" for ext in self.extensions)

    def match(self, basename: str, candidates: Sequence[str]) -> Optional[str]:
        """
        Pick the preferred convention filename present in ``candidates``.

        Matching is exact and case-sensitive. When several extension variants
        exist the first one in ``extensions`` order is returned.
        """
        present = set(candidates)
        for filename in self.filenames(basename):
            if filename in present:
                return filename
        return None

    def strip_extension(self, filename: str) -> str:
        """Drop a supported extension, producing an import specifier tail."""
        for ext in self.extensions:
            if filename.endswith(ext):
                return filename[: -len(ext)]
        return filename

    def with_template(self, template: str) -> "Convention":
        """Copy of this convention using ``template`` as the server template."""
        return dataclasses.replace(self, server_template=template)


def default_convention(extensions: Optional[Sequence[str]] = None) -> Convention:
    """
    Build the default convention, optionally overriding the extension order.
    """
    if extensions:
        return Convention(extensions=tuple(extensions))
    return Convention()

"""Exception hierarchy for route-tree compilation errors."""


class CompilerError(Exception):
    """Base exception for all compile failures.

    Every error carries the path it is about. Catching this exception
    catches every failure the compiler reports; the underlying OS or parser
    error is chained as ``__cause__``.

    Example:
        try:
            compile_server("src", "nexp-compiled", "server.ts")
        except CompilerError as e:
            logger.error(f"Compile failed: {e}")
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class ResolutionError(CompilerError):
    """Raised when the source root is missing or cannot be scanned.

    Example:
        ResolutionError("Source directory does not exist: /work/src")
    """


class VirtualGroupUsageError(ResolutionError):
    """Raised when a virtual-group name is used where an identifier is needed.

    Example:
        VirtualGroupUsageError("Virtual group '(admin)' cannot own a sub-router")
    """


class RouteParseError(CompilerError):
    """Raised when a route file cannot be read or parsed.

    Example:
        RouteParseError("Syntax error in app/user/route.ts at line 3, column 14")
    """


class TemplateError(CompilerError):
    """Raised when the custom server template cannot be read."""


class OutputWriteError(CompilerError):
    """Raised when the destination directory or file cannot be written."""

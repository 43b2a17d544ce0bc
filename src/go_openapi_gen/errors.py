"""Exception hierarchy for go-openapi-gen."""


class GoOpenAPIError(Exception):
    """Base class for every error raised on purpose by this package."""


class GoSyntaxError(GoOpenAPIError):
    """Go source could not be tokenized or parsed."""

    def __init__(self, message: str, filename: str = "<source>", line: int = 0):
        self.message = message
        self.filename = filename
        self.line = line
        super().__init__(f"{filename}:{line}: {message}")


class ExtractionError(GoOpenAPIError):
    """A source file could not be read or parsed, or the route glob is invalid."""


class ConfigError(GoOpenAPIError):
    """The configuration file is unreadable or invalid."""


class ModelConflictError(GoOpenAPIError):
    """Two models or schemas claim the same name under the ``error`` conflict policy."""

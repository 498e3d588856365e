"""Exception types raised by the farmcheck core."""


class FarmCheckError(Exception):
    """Base class for farmcheck errors."""


class ValidationError(FarmCheckError, ValueError):
    """A finding was constructed or wired with invalid inputs."""


class RenderError(FarmCheckError):
    """A single finding could not be rendered."""

    def __init__(self, name: str, cause: Exception):
        super().__init__(f"Failed to render finding '{name}': {cause}")
        self.name = name
        self.cause = cause

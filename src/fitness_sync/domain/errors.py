"""Error types shared across the package."""


class ValidationError(ValueError):
    """Raised when caller input is rejected before any local mutation."""


class RemoteCollectionError(RuntimeError):
    """Raised by remote adapters for any non-success outcome."""

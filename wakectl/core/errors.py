"""Domain-specific errors for wakectl."""


class WakectlError(Exception):
    """Base error for wakectl."""


class RegistryLoadError(WakectlError):
    """Raised when the devices file cannot be found or read."""


class RegistryValidationError(WakectlError):
    """Raised when the devices file does not conform to schema or semantics."""


class TransportError(WakectlError):
    """Base transport error."""


class TransportSendError(TransportError):
    """Raised when a wake packet or probe cannot be sent."""


class TransportTimeoutError(TransportError):
    """Raised when a probe does not complete before its deadline."""

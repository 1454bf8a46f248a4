"""Domain-specific errors for cecctl."""


class CecctlError(Exception):
    """Base error for cecctl."""


class ValidationError(CecctlError):
    """Raised when a byte, address, or payload input is malformed."""


class ConfigError(CecctlError):
    """Raised when a config file does not conform to schema or semantics."""


class ConfigLoadError(CecctlError):
    """Raised when reading a config file fails."""


class UnknownKeyError(CecctlError):
    """Raised when a remote key cannot be resolved to a control code."""


class AdapterError(CecctlError):
    """Raised when the adapter process cannot run or exits non-zero."""


class AvailabilityError(AdapterError):
    """Raised when the adapter binary cannot be found on PATH."""


class CommandTimeoutError(AdapterError, TimeoutError):
    """Raised when the adapter process outlives its timeout."""

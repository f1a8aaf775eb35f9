"""Domain-specific errors for hwmodctl."""


class HwmodctlError(Exception):
    """Base error for hwmodctl."""


class SettingsError(HwmodctlError):
    """Raised when the settings file cannot be read or fails validation."""


class ModuleValidationError(HwmodctlError):
    """Raised when a module request is missing a required identifier."""


class ExtractionError(HwmodctlError):
    """Raised when a module archive is malformed or cannot be written out."""


class ConfigReadError(HwmodctlError):
    """Raised when the extracted module config cannot be read."""


class BlockFetchError(HwmodctlError):
    """Raised when a single block asset cannot be fetched or stored."""


class TransportError(HwmodctlError):
    """Base transport error."""


class ModuleDownloadError(TransportError):
    """Raised when the module archive request fails or returns a non-200 status."""


class EncryptionError(TransportError):
    """Raised when the encryption service rejects or fails a request."""

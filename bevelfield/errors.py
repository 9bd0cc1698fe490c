"""Errors raised by bevelfield."""


class BevelError(Exception):
    """Base class for bevelfield errors."""
    pass


class InvalidInputError(BevelError):
    """Pixel buffer or requested size cannot be processed."""
    pass


class ConfigError(BevelError):
    """Configuration value out of range or unknown."""
    pass


class ConfigLoadError(ConfigError):
    """Failed to load a saved configuration file."""
    pass


class ResourceExhaustedError(BevelError):
    """Working buffers could not be allocated."""
    pass

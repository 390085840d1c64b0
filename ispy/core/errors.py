"""Error types raised by the game core."""


class IspyError(Exception):
    """Base class for game errors that abort start-up."""


class AssetLoadError(IspyError):
    """A level image could not be fetched or decoded."""


class ConfigError(IspyError, ValueError):
    """The level manifest or its settings are missing or invalid."""

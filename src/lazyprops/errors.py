class LazyPropsError(Exception):
    """Base class for errors raised by the lazyprops tooling."""


class ConfigError(LazyPropsError, ValueError):
    """Invalid or unreadable generator configuration."""

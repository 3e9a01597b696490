"""Error types raised by tagbridge."""


class TagBridgeError(RuntimeError):
    """Base class for failures that abort a changelog run."""


class ConfigurationError(TagBridgeError):
    """Raised when a changelog configuration file cannot be parsed or validated."""


class InvalidPatternError(TagBridgeError):
    """Raised when the branch pattern is not a valid regular expression."""


class PlatformError(TagBridgeError):
    """Raised when the hosting platform API call fails."""

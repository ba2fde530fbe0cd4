"""Exception types raised by the slicer."""


class SlicerError(Exception):
    """Base class for every error the slicer reports to its caller."""


class ConfigError(SlicerError, ValueError):
    """A configuration value is out of range or malformed."""


class MissingInputError(SlicerError):
    """The source image could not be found or decoded."""


class PersistenceError(SlicerError):
    """Writing an output artifact failed."""

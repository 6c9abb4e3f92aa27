"""Exception types raised while normalising data and writing chart artifacts."""
from __future__ import annotations


class ChartError(Exception):
    """Base class for chart generation failures."""


class InvalidInputError(ChartError, ValueError):
    """Input was missing or produced no usable observations."""


class ArtifactWriteError(ChartError, OSError):
    """The chart document or snapshot could not be written."""


class ViewerLaunchError(ChartError):
    """The generated document could not be opened in a viewer."""

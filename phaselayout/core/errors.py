"""
PhaseLayout Errors

None of these are fatal to a running editor; callers report them and keep
the previous state.
"""


class LayoutError(Exception):
    """Base class for all PhaseLayout errors."""


class ImageLoadError(LayoutError):
    """A raster image could not be read or decoded."""


class LayoutParseError(LayoutError):
    """Layout text could not be read at all."""


class DefinitionImportError(LayoutError):
    """An external phase/detector definition document is malformed."""


class SerializationError(LayoutError):
    """Writing the serialized layout failed."""

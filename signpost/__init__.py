"""signpost: live preview of the nearest README."""

__version__ = "0.1.0"

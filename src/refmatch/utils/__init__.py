"""Common utility functions for refmatch."""

from refmatch.utils.timestamps import get_iso_timestamp

__all__ = ["get_iso_timestamp"]

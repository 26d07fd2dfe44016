"""Capture TCP segments with the PSH flag on an interface and print their headers and payload."""

__version__ = "0.1.0"
__all__ = ["__version__"]
"""Archive files into one container, optionally with LZ77 compression."""

__version__ = "0.1.0"
__all__ = ["__version__"]
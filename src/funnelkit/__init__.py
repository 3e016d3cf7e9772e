"""Marketing-performance planning toolkit for real-estate sales campaigns."""

__version__ = "0.3.0"

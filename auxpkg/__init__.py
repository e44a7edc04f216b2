"""auxpkg — install packages from the system archive and a source-based auxiliary repository."""

__version__ = "0.1.0"

"""lnb — register executables and shell commands under short names."""

__version__ = "0.1.0"

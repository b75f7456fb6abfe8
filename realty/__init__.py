"""Backend for the 20/20 Realtors listings site."""

__version__ = "0.1.0"

"""AV production risk dashboard backend for Current RMS."""

__version__ = "0.1.0"

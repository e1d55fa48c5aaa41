"""Direct booking engine: availability selection, pricing and reservation lifecycle."""

__version__ = "1.0.0"

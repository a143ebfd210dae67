"""Forum API - topic comment threads for the AI discussion forum."""

__version__ = "0.1.0"

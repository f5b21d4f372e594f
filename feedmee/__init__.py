"""feedmee - feed ingestion and classification engine for a desktop feed reader."""

__version__ = "0.1.0"

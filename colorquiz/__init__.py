"""Color Quiz: attempt lifecycle, persisted option shuffling and category scoring."""

__version__ = "1.0.0"

"""Settings and application lifecycle."""

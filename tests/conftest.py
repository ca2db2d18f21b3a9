"""Test session configuration."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("ENABLE_CACHE", "false")

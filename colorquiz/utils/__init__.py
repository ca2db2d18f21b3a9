"""Utility modules for Color Quiz."""

"""Request and response schemas for the Color Quiz API."""

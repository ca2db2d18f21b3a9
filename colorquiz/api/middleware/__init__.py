"""HTTP middleware for the Color Quiz API."""

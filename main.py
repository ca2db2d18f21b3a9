"""Main entry point for the Color Quiz API.

This module runs the FastAPI application directly with uvicorn.
"""

import uvicorn

from colorquiz.core.config import get_settings

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "colorquiz.api.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.is_development(),
        log_config=None,  # Use our custom logging
        access_log=False,  # Handled by middleware
        workers=1 if settings.is_development() else 4,
    )

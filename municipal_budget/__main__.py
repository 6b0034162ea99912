"""
Main entry point for running the application with `python -m municipal_budget`.
"""
import uvicorn
from municipal_budget.core.config import settings
from municipal_budget.core.logging import logger

def main():
    """Run the application with uvicorn."""
    logger.info(f"Starting {settings.api.title} on {settings.host}:{settings.port}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Log level: {settings.logging.level}")

    uvicorn.run(
        "municipal_budget.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.logging.level.lower(),
        access_log=True,
        workers=1 if settings.debug else None
    )

if __name__ == "__main__":
    main()

"""Run the API with uvicorn.

Usage:
    python -m backend.serve
"""
import uvicorn

from backend.core import config


def main() -> None:
    uvicorn.run(
        "backend.main:create_app",
        factory=True,
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

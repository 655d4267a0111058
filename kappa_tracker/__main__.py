"""Run the API server: python -m kappa_tracker"""

import uvicorn

from kappa_tracker.config import settings


def main() -> None:
    uvicorn.run(
        "kappa_tracker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

"""Run the API with uvicorn: `python -m cinemood`."""

import uvicorn

from cinemood.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "cinemood.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.is_development,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()

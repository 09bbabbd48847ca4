"""Run the API server: python -m jobboard"""

import uvicorn

from jobboard.core.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("jobboard.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()

"""Service entrypoint. Runs the market cache API under uvicorn."""
import os
import uvicorn

from macro_dashboard.config.settings import get_settings
from macro_dashboard.main import app


def main() -> None:
    host = os.environ.get("BACKEND_HOST", "127.0.0.1")
    port = int(os.environ.get("BACKEND_PORT", "8001"))
    uvicorn.run(app, host=host, port=port, log_level=get_settings().log_level.lower())


if __name__ == "__main__":
    main()

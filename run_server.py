"""Run the FastAPI server (dev helper)."""
from __future__ import annotations

import uvicorn

from workwell.core.config import get_settings
from workwell.core.logging_config import setup_logging


def main() -> None:
    s = get_settings()
    setup_logging(s.log_level)
    uvicorn.run("workwell.api.main:create_app", factory=True, host=s.api_host, port=s.api_port, reload=True)


if __name__ == "__main__":
    main()

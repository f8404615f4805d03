#!/usr/bin/env python
# =============================================================================
# Application Runner
# =============================================================================
"""
Entry point script for running the JobDesk backend.

Host and port default to the API_HOST and API_PORT settings.

Usage:
    python run.py
    python run.py --reload
    python run.py --host 0.0.0.0 --port 8787
"""

import argparse

import uvicorn

from jobdesk.config import get_settings


def main() -> None:
    """
    Parse command line arguments and start uvicorn.
    """
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the JobDesk backend")
    parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    args = parser.parse_args()

    uvicorn.run(
        "jobdesk.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse

import uvicorn

from banner_studio.config import configure_logging, settings


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="banner-studio", description="Run the banner studio web app.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    uvicorn.run(
        "banner_studio.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()

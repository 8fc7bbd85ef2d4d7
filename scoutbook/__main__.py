"""Entry point for scoutbook package."""

import argparse
import logging


def main() -> None:
    """Run the Scoutbook API server."""
    parser = argparse.ArgumentParser(
        description="Scoutbook - interactive scouting sessions",
        prog="scoutbook",
    )
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.add_argument("--debug", action="store_true", help="Log engine decisions at DEBUG")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from scoutbook.api.main import run_api

    run_api(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()

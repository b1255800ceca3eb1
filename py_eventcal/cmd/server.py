"""ICS feed server command-line tool."""

import argparse
import sys
from pathlib import Path


def main() -> None:
    """Main entry point for the feed server."""
    parser = argparse.ArgumentParser(
        description="py-eventcal ICS feed server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve events stored as JSON files in ./data
  py-eventcal-server ./data

  # Serve events from a Realtime Database (EVENTCAL_DATABASE_URL, EVENTCAL_DATABASE_SECRET)
  py-eventcal-server --rtdb --port 8080

Endpoints:
  - Feed: http://localhost:PORT/feed.ics?user=UID
        """,
    )
    parser.add_argument(
        "--addr",
        default="127.0.0.1",
        help="listening address (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="listening port (default: 8080)",
    )
    parser.add_argument(
        "--rtdb",
        action="store_true",
        help="read events from the Realtime Database instead of a directory",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="enable debug logging (logs database requests/responses as JSON)",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="data directory for the local JSON store (default: current directory)",
    )

    args = parser.parse_args()

    if args.debug:
        from py_eventcal.debug import setup_debug_logging, setup_rtdb_debug_logging

        setup_debug_logging()
        setup_rtdb_debug_logging()

    from py_eventcal.server import create_app

    if args.rtdb:
        from py_eventcal.storage import RealtimeDatabaseStore

        store = RealtimeDatabaseStore(debug=args.debug)
        source = store.client.config.base_url
    else:
        directory = Path(args.directory).resolve()
        if directory.exists() and not directory.is_dir():
            print(f"Error: path is not a directory: {directory}", file=sys.stderr)
            sys.exit(1)

        from py_eventcal.storage import LocalStore

        store = LocalStore(directory)
        source = str(directory)

    app = create_app(store)

    # Run with uvicorn
    import uvicorn

    print(f"Feed server listening on {args.addr}:{args.port}")
    print(f"Reading events from: {source}")
    print(f"Feed: http://{args.addr}:{args.port}/feed.ics?user=UID")

    uvicorn.run(
        app,
        host=args.addr,
        port=args.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()

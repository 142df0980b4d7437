#!/usr/bin/env python3
"""
burstcull - HTTP API server
===========================
Serves the grouping JSON API for review front-ends.

Run with: python -m burstcull serve
Or: burstcull-serve

Options:
    -q, --quiet     Quiet mode - suppress all output except errors
    -v, --verbose   Verbose mode - show all Flask request logs
    -p, --port      Port to run on (default: 5000)
    --db            Library database file
"""

import argparse
import logging

from flask import Flask

from .api import api
from .database import PhotoStore, get_store
from .similarity.dependencies import Image
from .state import GroupingJobState
from .user_config import get_user_config


# Logging levels
LOG_QUIET = 0    # No output except errors
LOG_MINIMAL = 1  # Startup info only (default)
LOG_VERBOSE = 2  # All Flask request logs


def create_app(store: PhotoStore = None, log_level: int = LOG_MINIMAL) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        store: Library to serve; the global store when None
        log_level: Logging verbosity level

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)
    app.config['PHOTO_STORE'] = store if store is not None else get_store()
    app.config['GROUPING_JOB'] = GroupingJobState()

    if log_level < LOG_VERBOSE:
        # Suppress Flask's default request logging
        log = logging.getLogger('werkzeug')
        log.setLevel(logging.ERROR if log_level == LOG_QUIET else logging.WARNING)

    app.register_blueprint(api)

    return app


def suppress_flask_banner():
    """Suppress Flask's development server banner and startup messages."""
    try:
        import flask.cli
        flask.cli.show_server_banner = lambda *args, **kwargs: None
    except (ImportError, AttributeError):
        pass

    logging.getLogger('werkzeug').setLevel(logging.ERROR)


def main(argv=None):
    """Main entry point for the API server."""
    parser = argparse.ArgumentParser(
        description='burstcull - grouping API server',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Quiet mode - suppress all output except errors'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose mode - show all Flask request logs'
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        default=5000,
        help='Port to run the server on (default: 5000)'
    )
    parser.add_argument(
        '--db',
        default=None,
        help='Library database file (default: ~/.burstcull/library.db)'
    )

    args = parser.parse_args(argv)

    if args.quiet:
        log_level = LOG_QUIET
    elif args.verbose:
        log_level = LOG_VERBOSE
    else:
        log_level = LOG_MINIMAL

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    Image.MAX_IMAGE_PIXELS = get_user_config().max_image_pixels
    store = PhotoStore(args.db) if args.db else None
    app = create_app(store, log_level)

    if log_level >= LOG_MINIMAL:
        print()
        print("  burstcull API")
        print(f"  Library: {app.config['PHOTO_STORE'].db_path}")
        print(f"  Server running at: http://localhost:{args.port}")
        print("  Press Ctrl+C to stop")
        print()

    if log_level < LOG_VERBOSE:
        suppress_flask_banner()

    try:
        app.run(
            host='127.0.0.1',
            port=args.port,
            debug=False,
            threaded=True,
            use_reloader=False
        )
    except KeyboardInterrupt:
        if log_level >= LOG_MINIMAL:
            print("\n  Server stopped\n")


if __name__ == '__main__':
    main()

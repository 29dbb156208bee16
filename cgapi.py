#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
contactgraph API server entrypoint.

Command-line options are exported as ``CG_*`` environment variables and
picked up by ``contactgraph.api.main:create_app_from_env``, so the
same settings apply with and without ``--reload``.
"""

import argparse
import os

import uvicorn


def main():
    """Main function to run the FastAPI application"""
    parser = argparse.ArgumentParser(description='contactgraph GraphQL API Server')
    parser.add_argument('-H', '--host', default=None, help='Host to bind to')
    parser.add_argument('-p', '--port', type=int, default=None, help='Port to bind to')
    parser.add_argument('-d', '--db', default=None, help='SQLite database path (":memory:" for none)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload for development')
    args = parser.parse_args()

    if args.host:
        os.environ['CG_API_HOST'] = args.host
    if args.port:
        os.environ['CG_API_PORT'] = str(args.port)
    if args.db:
        os.environ['CG_DB_PATH'] = args.db
    if args.debug:
        os.environ['CG_DEBUG'] = '1'

    uvicorn.run(
        "contactgraph.api.main:create_app_from_env",
        factory=True,
        host=args.host or os.environ.get('CG_API_HOST', '127.0.0.1'),
        port=args.port or int(os.environ.get('CG_API_PORT', '4000')),
        reload=args.reload,
        log_level="debug" if args.debug else "info",
    )


if __name__ == "__main__":
    main()

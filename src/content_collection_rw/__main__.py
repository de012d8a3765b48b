"""Run the content collection HTTP service.

Usage:
    python -m content_collection_rw [--host HOST] [--port PORT] [--log-level LEVEL]

Connection settings for the graph store come from CCRW_FALKORDB_* variables.
"""

import argparse
import logging

import uvicorn

from .config import settings


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="content-collection-rw", description="A RESTful API for managing Content Collections in a graph store"
    )
    parser.add_argument("--host", default=settings.http.host, help="bind host (default: from CCRW_HTTP_HOST)")
    parser.add_argument("--port", type=int, default=settings.http.port, help="bind port (default: from CCRW_HTTP_PORT)")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="log level (default: from CCRW_LOG_LEVEL)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logger = logging.getLogger("content_collection_rw")
    logger.info(
        f"Application starting: app_name={settings.app_name} system_code={settings.app_system_code} "
        f"graph={settings.falkordb.host}:{settings.falkordb.port}/{settings.falkordb.graph_name} port={args.port}"
    )

    from .web.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()

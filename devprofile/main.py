"""
Command line entrypoint.

By default the negotiation document for one runtime is printed as JSON.
``--serve`` runs the HTTP surface under uvicorn instead.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .api.server import create_app
from .config import ProfileConfig, ProfileError, load_report_file
from .context import ProfileContext
from .platform.adapters import adapter_for_report
from .utils.logging import configure_logging

LOG = logging.getLogger(__name__)


def serve(config: ProfileConfig, host: str = "127.0.0.1", port: int = 8080) -> None:
    """
    Run the HTTP surface until interrupted.
    """

    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port, log_config=None, log_level="info")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a device negotiation profile")
    parser.add_argument("--runtime", default=None, help="recorded runtime name to build for")
    parser.add_argument("--report", default=None, help="JSON or YAML runtime report file")
    parser.add_argument("--runtimes", default=None, help="alternative runtimes YAML file")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    parser.add_argument("--serve", action="store_true", help="serve the HTTP API instead")
    parser.add_argument("--host", default="127.0.0.1", help="bind host for the API server")
    parser.add_argument("--port", type=int, default=8080, help="bind port for the API server")
    parser.add_argument("--verbose", action="store_true", help="log probe details")
    return parser.parse_args(argv)


def run(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    config = ProfileConfig(runtime=args.runtime, runtimes_path=args.runtimes)

    if args.serve:
        try:
            serve(config, host=args.host, port=args.port)
        except KeyboardInterrupt:
            LOG.info("Server interrupted by user.")
        return 0

    try:
        report = load_report_file(args.report) if args.report else config.report()
    except (OSError, ProfileError) as exc:
        LOG.error("%s", exc)
        return 1

    context = ProfileContext(adapter_for_report(report))
    sys.stdout.write(context.build().to_json(indent=args.indent or None))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(run())

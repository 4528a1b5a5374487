"""
DLNA catalog CLI - entry point

Runs the web backend, or a single sync pass from the command line.
"""

import argparse
import asyncio
import sys

from dlna_catalog.core.config import Config, ensure_directories, load_config
from dlna_catalog.core.output import setup_from_config


def run_sync(config: Config, container_id: str, include_metadata: bool = True) -> int:
    """Run one sync pass and print a summary.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from dlna_catalog.domain.catalog.errors import CatalogError
    from dlna_catalog.service import CatalogService

    async def _run():
        service = CatalogService(config)
        try:
            return await service.orchestrator.sync(container_id, include_metadata)
        finally:
            await service.aclose()

    try:
        result = asyncio.run(_run())
    except CatalogError as e:
        print(f"Sync failed: {e}", file=sys.stderr)
        return 1

    snapshot = result.snapshot
    if result.changed:
        print(f"Synced {container_id}: {result.scanned} scanned, {result.removed} removed")
    else:
        print(f"{container_id} unchanged")
    print(
        f"{snapshot.metadata.total_containers} containers, "
        f"{snapshot.metadata.total_items} items"
    )
    return 0


def run_server(config: Config) -> int:
    """Serve the web backend with uvicorn."""
    import uvicorn

    uvicorn.run("web.backend.main:app", host="0.0.0.0", port=config.server.port)
    return 0


def main() -> None:
    """Main entry point for the dlna-catalog command."""
    parser = argparse.ArgumentParser(
        description="DLNA catalog - mirror a media server's browse tree",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='subcommand', help='Available commands')

    subparsers.add_parser('serve', help='Run the HTTP backend')

    sync_parser = subparsers.add_parser('sync', help='Run one sync pass')
    sync_parser.add_argument(
        'container_id',
        nargs='?',
        default='0',
        help='Container to browse (default: root "0")'
    )
    sync_parser.add_argument(
        '--no-metadata',
        action='store_true',
        help='Store items as listed, without probing or album art'
    )

    args = parser.parse_args()

    config = load_config()
    setup_from_config(config.logging)
    ensure_directories(config)

    if args.subcommand == 'sync':
        sys.exit(run_sync(config, args.container_id, not args.no_metadata))

    sys.exit(run_server(config))


if __name__ == "__main__":
    main()

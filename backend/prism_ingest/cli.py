"""
Command line entry point.

    prism-ingest serve               Run the API (and the configured watchers)
    prism-ingest import <folder>     One-time import of a folder
    prism-ingest watch <folder>      Watch a folder without the API
"""
import argparse
import asyncio
import json
import sys

from .core.config import API_HOST, API_PORT
from .core.logging_config import DEFAULT_LOG_LEVEL, setup_logging, get_logger
from .domain.value_objects import ROLE_EMAIL, ROLE_TRANSCRIPTS
from .routers import dependencies

logger = get_logger(__name__)


def _serve(args) -> int:
    import uvicorn
    uvicorn.run("prism_ingest.main:app", host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


async def _import(folder: str) -> int:
    from .api.mappers import IngestionResultMapper
    from .utils.validators import validate_watch_folder
    
    path = validate_watch_folder(folder)
    await dependencies.initialize_services()
    try:
        results = await dependencies.get_pipeline().import_folder(path)
    finally:
        await dependencies.shutdown_services()
    
    summary = IngestionResultMapper.to_summary(results)
    print(json.dumps(summary.model_dump(exclude={"results"}), indent=2))
    return 1 if summary.failed else 0


async def _watch(folder: str, role: str) -> int:
    await dependencies.initialize_services()
    manager = dependencies.get_watcher_manager()
    try:
        if not await manager.start(role, folder):
            logger.error(f"Could not watch {folder}: {manager.errors.get(role)}")
            return 1
        logger.info("Watching; press Ctrl+C to stop")
        await asyncio.Event().wait()
    finally:
        await dependencies.shutdown_services()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prism-ingest", description="Watched-folder ingestion")
    parser.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)
    
    serve = sub.add_parser("serve", help="Run the HTTP API with the configured watchers")
    serve.add_argument("--host", default=API_HOST)
    serve.add_argument("--port", type=int, default=API_PORT)
    
    imp = sub.add_parser("import", help="Import every supported file directly inside a folder")
    imp.add_argument("folder")
    
    watch = sub.add_parser("watch", help="Watch a folder until interrupted")
    watch.add_argument("folder")
    watch.add_argument("--email", action="store_true", help="Treat the folder as the email folder")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper())
    
    if args.command == "serve":
        return _serve(args)
    try:
        if args.command == "import":
            return asyncio.run(_import(args.folder))
        return asyncio.run(_watch(args.folder, ROLE_EMAIL if args.email else ROLE_TRANSCRIPTS))
    except ValueError as e:
        logger.error(str(e))
        return 2
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())

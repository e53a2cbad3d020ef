# -*- coding: utf-8 -*-
"""
Media Catalog Scanner - Command line entry point
Scans the media index into a normalized tracks/albums/artists catalog

Usage:
    python main_app.py scan                         # Full catalog as JSON
    python main_app.py scan --sequential            # Run the three queries one by one
    python main_app.py scan --with-links            # Link albums to their tracks
    python main_app.py scan-folder "content://com.android.externalstorage.documents/tree/primary%3AMusic"
    python main_app.py scan-folder URI --with-breakdown   # Also derive albums/artists
    python main_app.py init-index                   # Create an empty media index database
"""
import argparse
import json
import logging
import sqlite3
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from media_catalog.config_loader import Config
from media_catalog.errors import MissingFolderReference, ScanFailed
from media_catalog.logging_utils import add_logging_args, configure_logging, redact, resolve_log_level
from media_catalog.media_index import ensure_index_schema
from media_catalog.scan_service import CatalogService

logger = logging.getLogger("main_app")


class CatalogApp:
    """Main application orchestrator"""

    def __init__(self, config: Config, parallel: Optional[bool] = None):
        self.config = config
        self.service = CatalogService.from_config(config, parallel=parallel)
        logger.debug(
            f"Using media index {redact(config.index_database_path)} "
            f"(parallel={self.service.builder.parallel}, workers={config.max_workers})"
        )

    def scan(self, with_links: bool = False) -> Dict[str, Any]:
        return self.service.scan_music(with_links=with_links)

    def scan_folder(self, folder_uri: Optional[str], with_breakdown: bool = False) -> Dict[str, Any]:
        return self.service.scan_folder(folder_uri, with_breakdown=with_breakdown)

    def init_index(self) -> Path:
        """Create the media index tables (existing tables are left alone)."""
        db_path = Path(self.config.index_database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path)
        try:
            ensure_index_schema(conn)
        finally:
            conn.close()
        logger.info(f"Media index ready at {redact(db_path)}")
        return db_path


def _write_json(payload: Dict[str, Any], output: Optional[str]) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {redact(out_path)}")
    else:
        sys.stdout.write(text + "\n")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    add_logging_args(common)

    parser = argparse.ArgumentParser(
        description="Build a normalized music catalog from the media index"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", parents=[common], help="Scan tracks, albums and artists")
    scan.add_argument("--output", "-o", help="Write JSON to this file instead of stdout")
    scan.add_argument(
        "--sequential",
        action="store_true",
        help="Run the three index queries one after another"
    )
    scan.add_argument(
        "--with-links",
        action="store_true",
        help="Add track ids and artist id to every album"
    )

    folder = subparsers.add_parser("scan-folder", parents=[common], help="Scan the tracks of one folder")
    folder.add_argument("folder_uri", nargs="?", help="Folder URI from the folder picker")
    folder.add_argument("--output", "-o", help="Write JSON to this file instead of stdout")
    folder.add_argument(
        "--with-breakdown",
        action="store_true",
        help="Derive albums and artists from the matched tracks"
    )

    subparsers.add_parser("init-index", parents=[common], help="Create an empty media index database")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code"""
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1

    # Logs go to stderr so stdout stays valid JSON
    configure_logging(
        level=resolve_log_level(args),
        log_file=args.log_file or config.log_file,
        run_id=uuid.uuid4().hex[:8],
        show_run_id=args.show_run_id,
        stream=sys.stderr,
        force=True,
    )

    app = CatalogApp(config, parallel=False if getattr(args, "sequential", False) else None)

    try:
        if args.command == "scan":
            _write_json(app.scan(with_links=args.with_links), args.output)
        elif args.command == "scan-folder":
            _write_json(app.scan_folder(args.folder_uri, with_breakdown=args.with_breakdown), args.output)
        elif args.command == "init-index":
            app.init_index()
    except MissingFolderReference as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except ScanFailed as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except sqlite3.Error as e:
        print(f"Error: cannot initialize media index: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command line entry point."""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config.settings import get_settings
from .config.manager import ConfigManager
from .core.manager import ShareManager
from .core.models import SortKey
from .core.orchestrator import ConnectionOrchestrator, default_credential_sets
from .backends.factory import BackendFactory
from .utils.logging import setup_logging, get_logger


class ShareSyncApp:
    """Runs one command against the configured share."""

    def __init__(self, config_file: Optional[str] = None, output=None):
        """Initialize the application.

        Args:
            config_file: Share configuration file; defaults to the application setting
            output: Stream for command results; defaults to stdout
        """
        self.settings = get_settings()
        self.logger = get_logger("ShareSync")
        self.output = output or sys.stdout
        self.config_manager = ConfigManager(config_file=config_file)
        self.config = self.config_manager.load_config()

    def _write(self, line: str) -> None:
        self.output.write(line + "\n")

    def probe(self) -> int:
        """Report which default credential set reaches the share."""
        config = self.config
        orchestrator = ConnectionOrchestrator(
            config.network_path,
            BackendFactory.create_from_config(config)
        )
        report = orchestrator.probe(
            default_credential_sets(
                config.username,
                config.password.get_secret_value(),
                config.remote_ip,
                config.domain
            )
        )

        if report.success:
            self._write(f"Connected to {report.share_path} with: {report.succeeded_with}")
            return 0

        self._write(f"Unable to connect to {report.share_path}")
        for error in report.errors:
            self._write(f"  {error}")
        return 1

    def list_share(self) -> int:
        """Write the files and directories at the share root."""
        with ShareManager(self.config, config_manager=self.config_manager) as manager:
            if not manager.connect():
                self._write(f"Unable to connect to {manager.network_path}")
                return 1

            for directory in manager.get_directories():
                self._write(f"[DIR]  {directory}")
            for path in manager.get_files():
                self._write(f"       {path}")
        return 0

    def copy_latest(
        self,
        extension: str,
        count: Optional[int],
        destination: Optional[str] = None,
        ascending: bool = False,
        overwrite: bool = True,
        recursive: bool = False,
        by_created: bool = False
    ) -> int:
        """Copy the newest files with an extension; succeeds if at least one was copied."""
        with ShareManager(self.config, config_manager=self.config_manager) as manager:
            if not manager.connect():
                self._write(f"Unable to connect to {manager.network_path}")
                return 1

            copied = manager.copy_latest_files_by_extension(
                extension,
                count,
                destination,
                ascending=ascending,
                overwrite=overwrite,
                recursive=recursive,
                sort_key=SortKey.CREATED if by_created else SortKey.MODIFIED
            )
            result = manager.sync_engine.last_result

        attempted = result.files_attempted if result else 0
        self._write(f"Copied {copied} of {attempted} file(s)")
        return 0 if copied > 0 else 1

    def copy_file(self, remote: str, local: str, overwrite: bool = True) -> int:
        """Copy one remote file to a local path."""
        with ShareManager(self.config, config_manager=self.config_manager) as manager:
            if not manager.connect():
                self._write(f"Unable to connect to {manager.network_path}")
                return 1

            copied = manager.copy_file_to_local(remote, local, overwrite)

        self._write(f"Copied {remote} to {local}" if copied else f"Failed to copy {remote}")
        return 0 if copied else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="sharesync",
        description="Connect to an SMB share and copy files from it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s probe                         # Find a credential set that works
  %(prog)s list                          # List the share root
  %(prog)s latest csv --count 5          # Copy the five newest .csv files
  %(prog)s copy reports/a.csv ./a.csv    # Copy one file
        """
    )
    parser.add_argument("--config", help="Share configuration file (default: ./config.json)")
    parser.add_argument("--log-level", help="Logging level (default: from LOG_LEVEL or INFO)")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("probe", help="Try the default credential sets")
    commands.add_parser("list", help="List files and directories at the share root")

    latest = commands.add_parser("latest", help="Copy the newest files with an extension")
    latest.add_argument("extension", help="File extension, with or without the leading dot")
    latest.add_argument("--count", type=int, default=10, help="Number of files (default: 10)")
    latest.add_argument("--dest", help="Local directory (default: configured local base path)")
    latest.add_argument("--ascending", action="store_true", help="Copy the oldest files instead")
    latest.add_argument("--no-overwrite", action="store_true", help="Keep existing local files")
    latest.add_argument("--recursive", action="store_true", help="Search subdirectories too")
    latest.add_argument("--by-created", action="store_true", help="Order by creation time")

    copy = commands.add_parser("copy", help="Copy one file")
    copy.add_argument("remote", help="File path relative to the share root")
    copy.add_argument("local", help="Local destination file")
    copy.add_argument("--no-overwrite", action="store_true", help="Keep an existing local file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(
        log_level=args.log_level or settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file_path
    )

    logger = get_logger("main")
    logger.info("Starting ShareSync", version=settings.version, command=args.command)

    app = ShareSyncApp(config_file=args.config)

    if args.command == "probe":
        return app.probe()
    if args.command == "list":
        return app.list_share()
    if args.command == "latest":
        return app.copy_latest(
            args.extension,
            args.count,
            args.dest,
            ascending=args.ascending,
            overwrite=not args.no_overwrite,
            recursive=args.recursive,
            by_created=args.by_created
        )
    return app.copy_file(args.remote, args.local, overwrite=not args.no_overwrite)


if __name__ == "__main__":
    sys.exit(main())

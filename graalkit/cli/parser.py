"""
GraalKit CLI argument parser.

This module implements the command-line interface for GraalKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from graalkit.core.exceptions import GraalKitError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("graalkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """GraalKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="graalkit",
            description="GraalKit - download, cache and run GraalVM native-image",
            epilog='Use "graalkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"GraalKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./graalkit.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_download_command(subparsers)
        self._add_extract_command(subparsers)
        self._add_native_image_command(subparsers)
        self._add_info_command(subparsers)

        return parser

    def _add_toolkit_options(self, parser):
        """Options selecting the GraalVM distribution."""
        parser.add_argument(
            "--graal-version",
            metavar="VERSION",
            help="GraalVM version to use (default: from config, else 1.0.0-rc6)",
        )
        parser.add_argument(
            "--download-base-url",
            metavar="URL",
            help="Base URL GraalVM releases are downloaded from",
        )
        parser.add_argument(
            "--cache-dir",
            metavar="DIR",
            help="Cache root (default: ~/.graalkit/cache)",
        )

    def _add_download_command(self, subparsers):
        """Add 'download' subcommand."""
        parser = subparsers.add_parser(
            "download",
            help="Download and cache GraalVM binaries",
            description="Download the GraalVM archive for this platform unless cached",
        )
        self._add_toolkit_options(parser)

    def _add_extract_command(self, subparsers):
        """Add 'extract' subcommand."""
        parser = subparsers.add_parser(
            "extract",
            help="Extract GraalVM tooling",
            description="Download (if needed) and extract GraalVM tooling into the cache",
        )
        self._add_toolkit_options(parser)
        parser.add_argument(
            "--force",
            action="store_true",
            help="Re-extract even if the toolkit directory already exists",
        )

    def _add_native_image_command(self, subparsers):
        """Add 'native-image' subcommand."""
        parser = subparsers.add_parser(
            "native-image",
            help="Build a native executable",
            description="Run GraalVM native-image on the assembled classpath",
        )
        self._add_toolkit_options(parser)
        parser.add_argument(
            "--main-class",
            metavar="CLASS",
            help="Entry point class of the executable",
        )
        parser.add_argument(
            "--output-name",
            metavar="NAME",
            help="File name of the executable (default: project directory name)",
        )
        parser.add_argument(
            "--output-dir",
            metavar="DIR",
            help="Directory the executable is written to (default: build/graal)",
        )
        parser.add_argument(
            "--classpath",
            "-cp",
            action="append",
            metavar="PATH",
            help="Classpath entry (can be used multiple times; replaces config)",
        )
        parser.add_argument(
            "--force-extract",
            action="store_true",
            help="Re-extract GraalVM tooling before building",
        )

    def _add_info_command(self, subparsers):
        """Add 'info' subcommand."""
        parser = subparsers.add_parser(
            "info",
            help="Show resolved platform, cache paths and stage status",
            description="Show what each stage would do without running anything",
        )
        self._add_toolkit_options(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except GraalKitError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "download": "graalkit.cli.commands.download",
            "extract": "graalkit.cli.commands.extract",
            "native-image": "graalkit.cli.commands.native_image",
            "info": "graalkit.cli.commands.info",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()

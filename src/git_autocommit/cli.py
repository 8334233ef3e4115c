import argparse
import datetime
import logging
import sys

from rich.console import Console
from rich.table import Table

from . import daemon
from .config import Config, ConfigError
from .constants import APP_NAME, DEFAULT_CONFIG_FILE, EXIT_FAILURE, EXIT_OK

logger = logging.getLogger(APP_NAME)
console = Console()


def show_config(config: Config) -> None:
    """Prints the resolved configuration as the startup banner."""
    table = Table(title=APP_NAME, show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("WatchPath", str(config.watch_path))
    table.add_row("ProjectPath", str(config.project_path))
    table.add_row("Author", config.author)
    table.add_row("CommitMessage", config.commit_message)
    table.add_row(
        "CommitInterval", str(datetime.timedelta(seconds=config.commit_interval))
    )
    table.add_row("DoAdd", str(config.do_add))
    table.add_row("DoPush", str(config.do_push))
    table.add_row("AutoCommit", str(config.auto_commit))
    table.add_row("WatchEvents", ", ".join(sorted(config.watch_events)))
    table.add_row(
        "PromptTimeout",
        f"{config.prompt_timeout}s" if config.prompt_timeout else "none",
    )
    table.add_row("LogFile", str(config.log_file) if config.log_file else "none")

    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Watch a directory and periodically commit its changes to git.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the config file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the config, print it, and exit",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the git-autocommit CLI.

    Returns:
        int: The process exit code.
    """
    args = build_parser().parse_args(argv)
    daemon.setup_logging(args.verbose)

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        logger.error(f"Error reading config file {args.config}: {e}")
        return e.exit_code
    except Exception as e:
        logger.exception(f"Exception occurred while reading {args.config}: {e}")
        return EXIT_FAILURE

    show_config(config)
    if args.check:
        return EXIT_OK

    try:
        if config.log_file:
            daemon.add_file_logging(config.log_file)
        return daemon.run(config)
    except Exception as e:
        logger.exception(f"Exception occurred: {e}")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

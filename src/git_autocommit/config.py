import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from .constants import (
    APP_NAME,
    DEFAULT_AUTHOR,
    DEFAULT_COMMIT_INTERVAL,
    DEFAULT_COMMIT_MESSAGE,
    EXIT_MISSING_KEY,
    EXIT_NO_CONFIG,
    KNOWN_EVENT_KINDS,
    WATCH_EVENT_KINDS,
)

logger = logging.getLogger(APP_NAME)

REQUIRED_KEYS = ("WatchPath", "ProjectPath")
OPTIONAL_KEYS = (
    "Author",
    "CommitMessage",
    "DoAdd",
    "DoPush",
    "AutoCommit",
    "CommitInterval",
    "WatchEvents",
    "PromptTimeout",
    "LogFile",
)

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


class ConfigError(Exception):
    """Raised when the configuration cannot be used to start the watcher.

    Attributes:
        exit_code (int): The process exit code the CLI should return.
    """

    exit_code = 1


class ConfigFileNotFoundError(ConfigError):
    """The configuration file does not exist."""

    exit_code = EXIT_NO_CONFIG


class MissingConfigKeyError(ConfigError):
    """A required key is absent from the configuration file."""

    exit_code = EXIT_MISSING_KEY

    def __init__(self, key: str):
        super().__init__(f"{key} is missing from the configuration.")
        self.key = key


def parse_lines(lines: Iterable[str]) -> dict[str, str]:
    """Parses `key=value` lines into a mapping.

    Everything after a `#` is a comment. Lines without `=` or with an empty key
    are skipped. The line is split on the first `=` only, and a key that appears
    more than once keeps its last value.
    """
    values: dict[str, str] = {}
    for line in lines:
        line = line.split("#", 1)[0]
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        values[key] = value.strip()
    return values


def read_config_file(path: Path) -> dict[str, str]:
    """Reads and parses a config file.

    Raises:
        ConfigFileNotFoundError: If `path` is not an existing file.
    """
    if not path.is_file():
        raise ConfigFileNotFoundError(f"Config file {path} does not exist.")
    with open(path, encoding="utf-8", errors="replace") as f:
        return parse_lines(f)


def parse_bool(value: str) -> bool:
    """Converts a textual flag ('true', 'no', 'On', '1') to a bool."""
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid boolean '{value}'")


def parse_time(value: int | str) -> int:
    """Converts plain seconds or human-readable times ('30m', '1hr') to seconds."""
    if isinstance(value, int):
        return value
    match = re.match(
        r"^(\d+(?:\.\d+)?)\s*(s|sec|m|min|h|hr)?s?$", str(value).strip().lower()
    )
    if not match:
        raise ValueError(f"Invalid time format '{value}'")
    num, unit = float(match.group(1)), match.group(2) or "s"
    multiplier = {"s": 1, "sec": 1, "m": 60, "min": 60, "h": 3600, "hr": 3600}
    return int(num * multiplier[unit])


def parse_events(value: str) -> frozenset[str]:
    """Parses a comma separated list of filesystem event kinds."""
    kinds = frozenset(
        part.strip().lower() for part in value.split(",") if part.strip()
    )
    if not kinds:
        raise ValueError("No event kinds given")
    unknown = kinds - KNOWN_EVENT_KINDS
    if unknown:
        raise ValueError(f"Unknown event kinds: {', '.join(sorted(unknown))}")
    return kinds


@dataclass(frozen=True)
class Config:
    """Resolved watcher configuration. Immutable once loaded.

    Attributes:
        watch_path (Path): Directory tree observed for changes.
        project_path (Path): Working directory for every git command.
        author (str): Value passed to `git commit --author`.
        commit_message (str): Default commit message.
        commit_interval (int): Seconds between commit-cycle ticks.
        do_add (bool): Run `git add *` before committing.
        do_push (bool): Run `git push` after committing.
        auto_commit (bool): Skip the operator prompt and use `commit_message`.
        watch_events (frozenset[str]): Filesystem event kinds that mark changes.
        prompt_timeout (int | None): Seconds to wait for operator input, or
            None to wait indefinitely.
        log_file (Path | None): Optional rotating log file.
    """

    watch_path: Path
    project_path: Path
    author: str = DEFAULT_AUTHOR
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    commit_interval: int = DEFAULT_COMMIT_INTERVAL
    do_add: bool = True
    do_push: bool = False
    auto_commit: bool = False
    watch_events: frozenset[str] = WATCH_EVENT_KINDS
    prompt_timeout: int | None = None
    log_file: Path | None = None

    @classmethod
    def load(cls, path: Path | str) -> "Config":
        """Reads the config file at `path` and resolves it into a Config.

        Raises:
            ConfigFileNotFoundError: If the file does not exist.
            MissingConfigKeyError: If `WatchPath` or `ProjectPath` is absent.
        """
        return cls.from_mapping(read_config_file(Path(path)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "Config":
        """Builds a Config from parsed `key=value` pairs, applying defaults."""
        for key in REQUIRED_KEYS:
            if key not in values:
                raise MissingConfigKeyError(key)

        unknown = set(values) - set(REQUIRED_KEYS) - set(OPTIONAL_KEYS)
        if unknown:
            logger.warning(
                f"Unknown config keys: {', '.join(sorted(unknown))}. Ignoring."
            )

        interval = _convert(
            values, "CommitInterval", parse_time, DEFAULT_COMMIT_INTERVAL
        )
        if interval <= 0:
            logger.warning(
                f"Config error in CommitInterval: must be positive, got {interval}. "
                "Falling back to default."
            )
            interval = DEFAULT_COMMIT_INTERVAL

        timeout = _convert(values, "PromptTimeout", parse_time, 0)
        log_file = values.get("LogFile")

        return cls(
            watch_path=Path(values["WatchPath"]).expanduser(),
            project_path=Path(values["ProjectPath"]).expanduser(),
            author=values.get("Author", DEFAULT_AUTHOR),
            commit_message=values.get("CommitMessage", DEFAULT_COMMIT_MESSAGE),
            commit_interval=interval,
            do_add=_convert(values, "DoAdd", parse_bool, True),
            do_push=_convert(values, "DoPush", parse_bool, False),
            auto_commit=_convert(values, "AutoCommit", parse_bool, False),
            watch_events=_convert(
                values, "WatchEvents", parse_events, WATCH_EVENT_KINDS
            ),
            prompt_timeout=timeout if timeout > 0 else None,
            log_file=Path(log_file).expanduser() if log_file else None,
        )


def _convert(values, key, parser, default):
    """Runs `parser` over `values[key]`, warning and falling back on bad input."""
    if key not in values:
        return default
    try:
        return parser(values[key])
    except ValueError as e:
        logger.warning(f"Config error in {key}: {e}. Falling back to default.")
        return default

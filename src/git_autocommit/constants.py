"""Global constants and defaults for git-autocommit.

This module defines the application identity, the configuration defaults used
when a key is absent from the config file, and the process exit codes.
"""

# --- Identity ---
APP_NAME = "git-autocommit"
"""str: The human-readable application name (also the logger name)."""

DEFAULT_CONFIG_FILE = "autocommit.conf"
"""str: Config file read when no path is given on the command line."""

# --- Configuration Defaults ---
DEFAULT_AUTHOR = "AutoCommit Bot <autocommit@local.int>"
"""str: The author passed to `git commit --author`."""

DEFAULT_COMMIT_MESSAGE = "autocommit"
"""str: Message used in non-interactive mode or when the operator enters nothing."""

DEFAULT_COMMIT_INTERVAL = 1800
"""int: Seconds between commit-cycle timer ticks."""

WATCH_EVENT_KINDS = frozenset({"created", "modified", "deleted", "moved"})
"""frozenset[str]: Filesystem event kinds subscribed to by default."""

KNOWN_EVENT_KINDS = WATCH_EVENT_KINDS | {"opened", "closed", "closed_no_write"}
"""frozenset[str]: Every event kind accepted in the `WatchEvents` key."""

# --- Logging ---
MAX_LOG_SIZE = 5 * 1024 * 1024
"""int: Max bytes for the optional log file before rotation."""

LOG_BACKUP_COUNT = 5
"""int: Number of rotated log files kept."""

# --- Prompt ---
BELL_COUNT = 3
"""int: How many times the console bell rings before asking for a message."""

# --- Exit Codes ---
EXIT_OK = 0
EXIT_NO_CONFIG = 1
EXIT_MISSING_KEY = 2
EXIT_FAILURE = 255

GIT_NOT_FOUND = 127
"""int: Exit code reported when the git executable could not be launched."""

# --- Scheduling ---
SETTLE_DELAY = 1.5
"""float: Seconds changes stay ignored after a commit cycle.

Covers watchdog's event buffering delay, so git's own writes to the watched
tree (index, objects, maintenance locks) arriving late are not taken as new
changes.
"""

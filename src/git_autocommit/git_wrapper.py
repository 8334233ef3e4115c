import logging
import subprocess
from pathlib import Path

from .constants import APP_NAME, GIT_NOT_FOUND

logger = logging.getLogger(APP_NAME)


class GitRepo:
    """A wrapper around the Git command-line interface for a project directory.

    Every command runs with the project directory as its working directory and
    inherits the console's stdout and stderr. Only the exit code is reported
    back; a failing command is never raised as an exception, so callers can log
    the code and carry on.

    Attributes:
        path (Path): The working directory for git commands.
    """

    def __init__(self, path: Path):
        """Initializes the GitRepo instance.

        Args:
            path (Path): The directory git commands are run from.
        """
        self.path = path

    def _run(self, args: list[str]) -> int:
        """Executes a Git command within the project directory.

        Args:
            args (list[str]): A list of arguments to pass to the git command.

        Returns:
            int:    The exit code of the command, or 127 if git could not be
                    started at all.
        """
        logger.debug(f"Running git {' '.join(args)} in {self.path}")
        try:
            res = subprocess.run(["git", *args], cwd=self.path, check=False)
        except OSError as e:
            logger.error(f"Could not run git {args[0]}: {e}")
            return GIT_NOT_FOUND
        return res.returncode

    def add_all(self) -> int:
        """Stages everything matching `*` in the project directory.

        Returns:
            int: The exit code of `git add`.
        """
        return self._run(["add", "*"])

    def commit(self, message: str, author: str) -> int:
        """Creates a new commit with the provided message and author.

        Args:
            message (str): The commit message.
            author (str): The author in `Name <email>` form.

        Returns:
            int: The exit code of `git commit`.
        """
        return self._run(["commit", "-m", message, f"--author={author}"])

    def push(self) -> int:
        """Pushes the current branch to its configured upstream.

        Returns:
            int: The exit code of `git push`.
        """
        return self._run(["push"])

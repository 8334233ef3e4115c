"""The commit cycle: stage, resolve a message, commit, and optionally push."""

import logging
from dataclasses import dataclass

from .config import Config
from .constants import APP_NAME
from .git_wrapper import GitRepo
from .prompt import MessagePrompt

logger = logging.getLogger(APP_NAME)


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one commit cycle.

    Attributes:
        message (str): The commit message that was used.
        commit_code (int): Exit code of `git commit`.
        add_code (int | None): Exit code of `git add`, None if staging is off.
        push_code (int | None): Exit code of `git push`, None if pushing is off.
    """

    message: str
    commit_code: int
    add_code: int | None = None
    push_code: int | None = None


def _log_exit(step: str, code: int) -> None:
    if code == 0:
        logger.info(f"Git {step} exited with code: {code}")
    else:
        logger.warning(f"Git {step} exited with code: {code}")


def resolve_commit_message(config: Config, prompt: MessagePrompt | None) -> str:
    """Returns the operator's message, or the configured default.

    In non-interactive mode (or without a prompt) the default is used directly.
    Blank input, a timeout, and a cancelled prompt all fall back to it as well.
    """
    if config.auto_commit or prompt is None:
        return config.commit_message

    answer = prompt.ask(config.commit_message)
    if answer and answer.strip():
        return answer.strip()
    return config.commit_message


def run_commit_cycle(
    config: Config, repo: GitRepo, prompt: MessagePrompt | None = None
) -> CycleResult:
    """Runs add, commit, and push against the project repository.

    A non-zero exit code from any step is logged and the cycle moves on to the
    next step; nothing is retried.

    Args:
        config (Config): The resolved configuration.
        repo (GitRepo): The project repository.
        prompt (MessagePrompt | None): Used to ask for a message in interactive mode.

    Returns:
        CycleResult: The message and exit codes of the steps that ran.
    """
    add_code = None
    if config.do_add:
        add_code = repo.add_all()
        _log_exit("add", add_code)

    message = resolve_commit_message(config, prompt)

    commit_code = repo.commit(message, config.author)
    _log_exit("commit", commit_code)

    push_code = None
    if config.do_push:
        push_code = repo.push()
        _log_exit("push", push_code)

    return CycleResult(
        message=message, commit_code=commit_code, add_code=add_code, push_code=push_code
    )

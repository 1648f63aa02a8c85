"""Central logging configuration for the command line tool.

The root logger writes to a log file so that failed upgrades can be
diagnosed after the fact, including runs fired by the daily scheduler when
nobody is watching the terminal.  Repeated calls are no-ops.

``BUMPKIT_LOG_FILE``
    Absolute path to the log file that should be created.

``BUMPKIT_LOG_DIR``
    Directory where the default log file name will be created.  Ignored when
    ``BUMPKIT_LOG_FILE`` is present.

Home directories and user names are masked in every formatted record since
package paths usually live under the user's home.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from enum import Enum
from pathlib import Path

_LOG_FILE_ENV = "BUMPKIT_LOG_FILE"
_LOG_DIR_ENV = "BUMPKIT_LOG_DIR"
_DEFAULT_DIRNAME = ".bumpkit"
_DEFAULT_LOGNAME = "bumpkit.log"
_HANDLER_TAG = "_bumpkit_logging_handler"

USER_PLACEHOLDER = "<user>"
USER_HOME_PLACEHOLDER = "<user_home>"

_LOG_PATH: Path | None = None
_FILE_HANDLER: logging.FileHandler | None = None


class LogVerbosity(str, Enum):
    """Verbosity levels supported by the log file."""

    DISABLED = "disabled"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"


_VERBOSITY_LEVELS: dict[LogVerbosity, int] = {
    LogVerbosity.DISABLED: logging.CRITICAL + 1,
    LogVerbosity.ERROR: logging.ERROR,
    LogVerbosity.WARNING: logging.WARNING,
    LogVerbosity.INFO: logging.INFO,
    LogVerbosity.VERBOSE: logging.DEBUG,
}

_DEFAULT_VERBOSITY = LogVerbosity.INFO
_CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


def _redaction_patterns() -> list[tuple[re.Pattern[str], str]]:
    flags = re.IGNORECASE if os.name == "nt" else 0
    patterns: list[tuple[re.Pattern[str], str]] = []

    homes = {str(Path.home())}
    for env_var in ("HOME", "USERPROFILE"):
        value = os.environ.get(env_var)
        if value:
            homes.add(os.path.expanduser(value))
    for home in sorted(homes, key=len, reverse=True):
        normalised = os.path.normpath(home)
        if normalised in {os.sep, ".", ""}:
            continue
        patterns.append((re.compile(re.escape(normalised), flags), USER_HOME_PLACEHOLDER))

    users = {Path.home().name}
    for env_var in ("USERNAME", "USER", "LOGNAME"):
        value = os.environ.get(env_var)
        if value:
            users.add(value.strip())
    for user in sorted((name for name in users if name), key=len, reverse=True):
        patterns.append(
            (re.compile(rf"(?<!\w){re.escape(user)}(?!\w)", re.IGNORECASE), USER_PLACEHOLDER)
        )
    return patterns


class _RedactingFormatter(logging.Formatter):
    def __init__(self, fmt: str, datefmt: str | None = None) -> None:
        super().__init__(fmt, datefmt=datefmt)
        self._patterns = _redaction_patterns()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        for pattern, replacement in self._patterns:
            formatted = pattern.sub(replacement, formatted)
        return formatted


def ensure_app_logging(verbosity: LogVerbosity | str | None = None) -> Path:
    """Configure the root logger once and return the log file path.

    The file handler honours the current :class:`LogVerbosity`; a warning
    level stderr handler is added only when stderr is a terminal.
    """

    global _LOG_PATH, _FILE_HANDLER

    if _LOG_PATH is None:
        log_path = _resolve_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        root = logging.getLogger()
        root.setLevel(logging.DEBUG)
        formatter = _RedactingFormatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(_VERBOSITY_LEVELS[_CURRENT_VERBOSITY])
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_TAG, True)
        root.addHandler(file_handler)
        _FILE_HANDLER = file_handler

        if _stderr_is_terminal():
            stream_handler = logging.StreamHandler()
            stream_handler.setLevel(logging.WARNING)
            stream_handler.setFormatter(formatter)
            setattr(stream_handler, _HANDLER_TAG, True)
            root.addHandler(stream_handler)

        _LOG_PATH = log_path
        logging.getLogger(__name__).debug("Writing logs to %s", log_path)

    if verbosity is not None:
        set_file_log_verbosity(verbosity)
    return _LOG_PATH


def set_file_log_verbosity(verbosity: LogVerbosity | str) -> None:
    """Adjust the minimum severity recorded in the log file."""

    global _CURRENT_VERBOSITY

    if isinstance(verbosity, str):
        try:
            verbosity = LogVerbosity(verbosity.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported log verbosity: {verbosity}") from exc

    _CURRENT_VERBOSITY = verbosity
    if _FILE_HANDLER is not None:
        _FILE_HANDLER.setLevel(_VERBOSITY_LEVELS[verbosity])
    logging.getLogger(__name__).debug("File log verbosity set to %s", verbosity.value)


def get_file_log_verbosity() -> LogVerbosity:
    return _CURRENT_VERBOSITY


def _resolve_log_path() -> Path:
    env_file = os.environ.get(_LOG_FILE_ENV)
    if env_file:
        return Path(env_file).expanduser()

    env_dir = os.environ.get(_LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser() / _DEFAULT_LOGNAME

    return Path.home() / _DEFAULT_DIRNAME / "logs" / _DEFAULT_LOGNAME


def _stderr_is_terminal() -> bool:
    stderr = getattr(sys, "stderr", None)
    is_tty = getattr(stderr, "isatty", None)
    if not callable(is_tty):
        return False
    try:
        return bool(is_tty())
    except (OSError, ValueError):
        return False


def _reset_for_tests() -> None:
    """Remove handlers installed by :func:`ensure_app_logging`."""

    global _LOG_PATH, _FILE_HANDLER, _CURRENT_VERBOSITY

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    _LOG_PATH = None
    _FILE_HANDLER = None
    _CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


__all__ = [
    "LogVerbosity",
    "ensure_app_logging",
    "get_file_log_verbosity",
    "set_file_log_verbosity",
]

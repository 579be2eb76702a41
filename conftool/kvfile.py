"""Reading and writing ``key = value`` config files.

A config file holds one option per non-empty line. Values are kept as raw
strings in an insertion-ordered dict so that rewriting a file keeps existing
options where they were and appends new ones at the end.
"""

from collections.abc import Iterable, Mapping
from pathlib import Path

import structlog

from conftool.errors import LineFormatError

logger = structlog.get_logger(__name__)


def parse_lines(lines: Iterable[str]) -> dict[str, str]:
    """Parse config file lines into an ordered key-value mapping.

    Blank lines are skipped. Each remaining line is split at the first ``=``
    and both sides are trimmed.

    Args:
        lines: Raw lines of a config file, without line terminators

    Returns:
        Mapping of option name to raw value in file order

    Raises:
        LineFormatError: If a non-empty line has no ``=`` or no key
    """
    values: dict[str, str] = {}
    for lineno, line in enumerate(lines, 1):
        if not line.strip():
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            raise LineFormatError(lineno, line)
        values[key] = value.strip()
    return values


def render(values: Mapping[str, str]) -> str:
    """Render a key-value mapping as config file text.

    Args:
        values: Mapping of option name to value

    Returns:
        One ``key = value`` line per option, each newline terminated
    """
    return "".join(f"{key} = {value}\n" for key, value in values.items())


def read_lines(path: str | Path, missing_ok: bool = False) -> list[str]:
    """Read the raw lines of a config file.

    Args:
        path: Path to the config file
        missing_ok: If True, a missing file reads as empty

    Returns:
        The file's lines without terminators

    Raises:
        FileNotFoundError: If the file is missing and ``missing_ok`` is False
    """
    config_path = Path(path)
    if missing_ok and not config_path.exists():
        logger.debug("config_file_missing", path=str(config_path))
        return []

    text = config_path.read_text(encoding="utf-8")
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines[-1] == "":
        lines.pop()
    logger.debug("config_file_read", path=str(config_path), line_count=len(lines))
    return lines


def load_config(path: str | Path, missing_ok: bool = False) -> dict[str, str]:
    """Read and parse a config file.

    Args:
        path: Path to the config file
        missing_ok: If True, a missing file reads as an empty config

    Returns:
        Ordered mapping of option name to raw value

    Raises:
        FileNotFoundError: If the file is missing and ``missing_ok`` is False
        LineFormatError: If a line is malformed
    """
    return parse_lines(read_lines(path, missing_ok=missing_ok))


def write_config(values: Mapping[str, str], path: str | Path) -> None:
    """Write a key-value mapping to a config file, replacing its contents.

    Args:
        values: Mapping of option name to value
        path: Destination path

    Raises:
        FileNotFoundError: If the destination directory does not exist
    """
    config_path = Path(path)
    if not config_path.parent.exists():
        msg = f"Cannot create config in non-existent directory {config_path.parent}"
        raise FileNotFoundError(msg)

    config_path.write_text(render(values), encoding="utf-8")
    logger.info("config_file_written", path=str(config_path), option_count=len(values))

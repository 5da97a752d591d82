"""Parsing of key=value service definition files.

Only four keys are extracted. Everything else in the file, including
section headers such as ``[Service]``, is skipped without error.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from svcctl.models.service import (
    ACCOUNT_LIMIT,
    COMMAND_LIMIT,
    DESCRIPTION_LIMIT,
    TYPE_LIMIT,
    ServiceDefinition,
    clip,
)

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"

# Recognized key -> (model field, capacity)
RECOGNIZED_KEYS: dict[str, tuple[str, int]] = {
    "Type": ("type", TYPE_LIMIT),
    "ExecStart": ("exec_start", COMMAND_LIMIT),
    "Description": ("description", DESCRIPTION_LIMIT),
    "User": ("user", ACCOUNT_LIMIT),
}


def parse_definition_lines(lines: Iterable[str]) -> ServiceDefinition:
    """Extract the recognized fields from definition lines.

    Later occurrences of a key overwrite earlier ones.

    Args:
        lines: Lines of a definition file, with or without line endings.

    Returns:
        ServiceDefinition with every key that was found.
    """
    fields: dict[str, str] = {}

    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line or line.startswith(COMMENT_MARKER):
            continue

        key, sep, value = line.partition("=")
        if not sep:
            continue

        target = RECOGNIZED_KEYS.get(key.strip())
        if target is None:
            continue

        field, limit = target
        fields[field] = clip(value.strip(), limit)

    return ServiceDefinition(**fields)


def parse_definition_file(path: Path | str) -> ServiceDefinition:
    """Parse a definition file from disk.

    A missing or unreadable file yields an empty definition, so detail
    queries degrade instead of failing.

    Args:
        path: Location of the definition file.

    Returns:
        ServiceDefinition parsed from the file.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return parse_definition_lines(f)
    except OSError as e:
        logger.debug("Failed to read definition file %s: %s", path, e)
        return ServiceDefinition()

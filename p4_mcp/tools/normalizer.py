"""Result normalizer - turn p4 text output into the uniform ToolResult."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional

from p4_mcp.tools.catalog import CommandCatalog
from p4_mcp.tools.schema import ExecutionOutcome, OutputShape, ToolResult

logger = logging.getLogger(__name__)

EMPTY_OUTPUT = "(empty output)"

OPENED_RE = re.compile(
    r"^(?P<depot_file>//[^#]+)#(?P<revision>\d+|none) - (?P<action>[\w/]+) "
    r"(?:default change|change (?P<change>\d+)) \((?P<file_type>[^)]+)\)"
)
FILE_RE = re.compile(r"^(?P<depot_file>//[^#]+)#(?P<revision>\d+|none) - (?P<detail>.+)$")
CHANGE_RE = re.compile(
    r"^Change (?P<change>\d+) on (?P<date>\S+) by (?P<user>[^@\s]+)@(?P<client>\S+)"
    r"(?: \*(?P<status>pending|shelved)\*)? '(?P<description>.*)'$"
)
SUBMIT_RE = re.compile(r"Change (?P<change>\d+)(?: renamed change (?P<renamed>\d+) and)? submitted")


def _revision(value: str) -> Optional[int]:
    return None if value == "none" else int(value)


def _lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_opened(text: str) -> Optional[Dict[str, Any]]:
    files = []
    for line in _lines(text):
        match = OPENED_RE.match(line)
        if not match:
            continue
        change = match.group("change")
        files.append({
            "depot_file": match.group("depot_file"),
            "revision": _revision(match.group("revision")),
            "action": match.group("action"),
            "change": int(change) if change else "default",
            "file_type": match.group("file_type"),
        })
    return {"files": files} if files else None


def parse_files(text: str) -> Optional[Dict[str, Any]]:
    files = []
    for line in _lines(text):
        match = FILE_RE.match(line)
        if match:
            files.append({
                "depot_file": match.group("depot_file"),
                "revision": _revision(match.group("revision")),
                "detail": match.group("detail"),
            })
    return {"files": files} if files else None


def parse_changes(text: str) -> Optional[Dict[str, Any]]:
    changes = []
    for line in _lines(text):
        match = CHANGE_RE.match(line)
        if match:
            changes.append({
                "change": int(match.group("change")),
                "date": match.group("date"),
                "user": match.group("user"),
                "client": match.group("client"),
                "status": match.group("status") or "submitted",
                "description": match.group("description").strip(),
            })
    return {"changes": changes} if changes else None


def parse_info(text: str) -> Optional[Dict[str, Any]]:
    info: Dict[str, str] = {}
    for line in _lines(text):
        key, sep, value = line.partition(": ")
        if not sep:
            continue
        slug = re.sub(r"\W+", "_", key).strip("_").lower()
        if slug:
            info[slug] = value.strip()
    return {"info": info} if info else None


def parse_submit(text: str) -> Optional[Dict[str, Any]]:
    match = SUBMIT_RE.search(text)
    if not match:
        return None
    return {"change": int(match.group("renamed") or match.group("change"))}


PARSERS: Dict[OutputShape, Callable[[str], Optional[Dict[str, Any]]]] = {
    OutputShape.OPENED: parse_opened,
    OutputShape.FILES: parse_files,
    OutputShape.CHANGES: parse_changes,
    OutputShape.INFO: parse_info,
    OutputShape.SUBMIT: parse_submit,
}


class ResultNormalizer:
    """
    Shapes an :class:`ExecutionOutcome` into a :class:`ToolResult`.

    The catalog declares which structured shape each tool's output has.
    Output that does not look the way the parser expects is passed
    through as plain text with no ``data``; it is never an error.
    """

    def __init__(self, catalog: CommandCatalog):
        self._catalog = catalog

    def normalize(self, command_name: str, outcome: ExecutionOutcome) -> ToolResult:
        if not outcome.success:
            return ToolResult(success=False, message=outcome.message)

        message = outcome.output.strip() or EMPTY_OUTPUT
        if outcome.payload is not None:
            return ToolResult(success=True, message=message, data=outcome.payload)

        spec = self._catalog.get(command_name)
        parser = PARSERS.get(spec.shape) if spec else None
        data = None
        if parser is not None:
            try:
                data = parser(outcome.output)
            except (ValueError, IndexError, KeyError) as exc:
                logger.debug("Could not parse %s output, passing text through: %s", command_name, exc)
            if data is None:
                logger.debug("No structured entries in %s output", command_name)

        return ToolResult(success=True, message=message, data=data)

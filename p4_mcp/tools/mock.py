"""Canned p4 output for mock mode.

Every renderer is a pure function of the bound arguments, so identical
calls always produce identical text. Output follows p4's own line formats
behind a ``Mock P4 ...`` header so it parses like the real thing.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from p4_mcp.tools.schema import BoundArguments, CommandSpec

MOCK_CHANGE = 12345
MOCK_CHANGES_LIMIT = 5

OPENED_LINES = [
    "//depot/main/file1.txt#1 - edit default change (text)",
    "//depot/main/file2.cpp#2 - add default change (text)",
    "//depot/main/file3.h#1 - edit change 12346 (text)",
]

INFO_LINES = [
    "User name: testuser",
    "Client name: test-client",
    "Client host: test-host",
    "Client root: /home/testuser/p4/test-client",
    "Current directory: /home/testuser/p4/test-client/main",
    "Peer address: ssl:perforce.example.com:1666",
    "Client address: 192.168.1.100",
    "Server address: perforce.example.com:1666",
    "Server root: /opt/perforce/depot",
    "Server date: 2024/01/15 12:30:45 -0800 PST",
    "Server uptime: 15:32:18",
    "Server version: P4D/LINUX26X86_64/2023.1/2553040 (2023/06/15)",
    "ServerID: perforce-server",
    "Case Handling: insensitive",
]


def depot_path(path: str) -> str:
    """Map a client-relative path onto the mock depot."""
    if path.startswith("//"):
        return path
    relative = path.replace("\\", "/")
    while relative.startswith("./"):
        relative = relative[2:]
    return "//depot/main/" + relative.lstrip("/")


def _file_actions(header: str, files: List[str], revision: int, detail: str) -> str:
    lines = [header]
    lines.extend(f"{depot_path(f)}#{revision} - {detail}" for f in files)
    return "\n".join(lines)


def _status(bound: BoundArguments) -> str:
    path = bound.get("path") or "current directory"
    return "\n".join([f"Mock P4 Status for {path}:", *OPENED_LINES[:2]])


def _sync(bound: BoundArguments) -> str:
    path = bound.get("path", "...")
    force = bool(bound.get("force"))
    base = path[:-4] if path.startswith("//") and path.endswith("/...") else "//depot/main"
    verb = "refreshing" if force else "updating"
    lines = [
        f"Mock P4 Sync{' (forced)' if force else ''}:",
        f"{base}/file1.txt#1 - {verb} /local/workspace/file1.txt",
        f"{base}/file2.cpp#2 - {verb} /local/workspace/file2.cpp",
        "... synced 2 files",
    ]
    return "\n".join(lines)


def _edit(bound: BoundArguments) -> str:
    return _file_actions("Mock P4 Edit:", bound.get("files", []), 1, "opened for edit")


def _add(bound: BoundArguments) -> str:
    return _file_actions("Mock P4 Add:", bound.get("files", []), 1, "opened for add")


def _revert(bound: BoundArguments) -> str:
    return _file_actions("Mock P4 Revert:", bound.get("files", []), 1, "was edit, reverted")


def _submit(bound: BoundArguments) -> str:
    files = bound.get("files")
    file_info = f"Specific files: {', '.join(files)}" if files else "All opened files"
    lines = [
        "Mock P4 Submit:",
        f"Change description: {bound.get('description', '')}",
        f"Files: {file_info}",
        f"Submitting change {MOCK_CHANGE}.",
        f"Change {MOCK_CHANGE} submitted.",
    ]
    return "\n".join(lines)


def _opened(bound: BoundArguments) -> str:
    changelist = bound.get("changelist")
    header = f"Mock P4 Opened in changelist {changelist}:" if changelist else "Mock P4 Opened:"
    return "\n".join([header, *OPENED_LINES])


def _changes(bound: BoundArguments) -> str:
    limit = bound.get("max", 10)
    path = bound.get("path")
    header = f"Mock P4 Changes (max: {limit})"
    if path:
        header += f" for path {path}"
    lines = [header + ":"]
    for i in range(max(0, min(limit, MOCK_CHANGES_LIMIT))):
        lines.append(
            f"Change {12350 - i} on 2024/01/{15 - i:02d} by user@workspace "
            f"'Sample change description {i + 1}'"
        )
    return "\n".join(lines)


def _info(bound: BoundArguments) -> str:
    return "\n".join(["Mock P4 Info:", *INFO_LINES])


MOCK_RENDERERS: Dict[str, Callable[[BoundArguments], str]] = {
    "p4_status": _status,
    "p4_sync": _sync,
    "p4_edit": _edit,
    "p4_add": _add,
    "p4_submit": _submit,
    "p4_revert": _revert,
    "p4_opened": _opened,
    "p4_changes": _changes,
    "p4_info": _info,
}


def render_mock_output(spec: CommandSpec, bound: BoundArguments) -> str:
    renderer = MOCK_RENDERERS.get(spec.name)
    if renderer is None:
        return f"Mock P4 {spec.subcommand}: ok"
    return renderer(bound)

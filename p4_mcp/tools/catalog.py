"""Command catalog - the fixed set of p4 tool calls the server exposes."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from p4_mcp.tools.schema import CommandSpec, OutputShape, ParamKind, ParamSpec


class UnknownCommand(Exception):
    """Raised when a tool name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


def _files(description: str, required: bool = True) -> ParamSpec:
    return ParamSpec(
        name="files",
        kind=ParamKind.STRING_ARRAY,
        description=description,
        required=required,
    )


DEFAULT_COMMANDS: List[CommandSpec] = [
    CommandSpec(
        name="p4_status",
        description="Get Perforce workspace status",
        subcommand="opened",
        params=[ParamSpec(name="path", description="Optional path to check status for")],
        shape=OutputShape.OPENED,
    ),
    CommandSpec(
        name="p4_sync",
        description="Sync files from Perforce depot",
        subcommand="sync",
        params=[
            ParamSpec(
                name="force",
                kind=ParamKind.BOOLEAN,
                description="Force sync (overwrite local changes)",
                default=False,
                flag="-f",
            ),
            ParamSpec(name="path", description="Path to sync (e.g., //depot/main/...)", default="..."),
        ],
        shape=OutputShape.FILES,
    ),
    CommandSpec(
        name="p4_edit",
        description="Open file(s) for edit in Perforce",
        subcommand="edit",
        params=[_files("Files to open for edit")],
        shape=OutputShape.FILES,
        requires_files="files",
    ),
    CommandSpec(
        name="p4_add",
        description="Add new file(s) to Perforce",
        subcommand="add",
        params=[_files("Files to add")],
        shape=OutputShape.FILES,
        requires_files="files",
    ),
    CommandSpec(
        name="p4_submit",
        description="Submit changes to Perforce",
        subcommand="submit",
        params=[
            ParamSpec(name="description", description="Change description", required=True, flag="-d"),
            _files("Optional specific files to submit", required=False),
        ],
        shape=OutputShape.SUBMIT,
    ),
    CommandSpec(
        name="p4_revert",
        description="Revert files in Perforce",
        subcommand="revert",
        params=[_files("Files to revert")],
        shape=OutputShape.FILES,
        requires_files="files",
    ),
    CommandSpec(
        name="p4_opened",
        description="List files opened for edit",
        subcommand="opened",
        params=[ParamSpec(name="changelist", description="Optional changelist number", flag="-c")],
        shape=OutputShape.OPENED,
    ),
    CommandSpec(
        name="p4_changes",
        description="List recent changes",
        subcommand="changes",
        params=[
            ParamSpec(
                name="max",
                kind=ParamKind.INTEGER,
                description="Maximum number of changes to return",
                default=10,
                minimum=1,
                flag="-m",
            ),
            ParamSpec(name="path", description="Optional path to filter changes"),
        ],
        shape=OutputShape.CHANGES,
    ),
    CommandSpec(
        name="p4_info",
        description="Show Perforce client and server information",
        subcommand="info",
        shape=OutputShape.INFO,
    ),
]


class CommandCatalog:
    """
    Read-only registry of :class:`CommandSpec` keyed by tool name.

    Built once at startup; nothing mutates it afterwards, so lookups are
    safe from any thread without locking.
    """

    def __init__(self, specs: Iterable[CommandSpec]):
        self._specs: Dict[str, CommandSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name in catalog: {spec.name}")
            self._specs[spec.name] = spec

    @classmethod
    def default(cls) -> "CommandCatalog":
        return cls(DEFAULT_COMMANDS)

    # ── Tool Lookup ───────────────────────────────────────────────────────

    def lookup(self, name: str) -> CommandSpec:
        """Return the CommandSpec for ``name`` or raise :class:`UnknownCommand`."""
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownCommand(name)
        return spec

    def get(self, name: str) -> Optional[CommandSpec]:
        return self._specs.get(name)

    def names(self) -> List[str]:
        return sorted(self._specs)

    def list_specs(self) -> List[CommandSpec]:
        """Return all specs, sorted by name."""
        return [self._specs[name] for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

"""
p4 tool layer - catalog, argument binding, execution and normalization.

A tool call flows through the pieces in order:

    ToolRequest -> CommandCatalog -> bind() -> ExecutionStrategy -> ResultNormalizer -> ToolResult

``Dispatcher`` wires them together. ``LiveStrategy`` runs the real ``p4``
client; ``MockStrategy`` returns canned output with the same structure.
"""

from p4_mcp.tools.schema import (
    BoundArguments,
    CommandSpec,
    ExecutionMode,
    ExecutionOutcome,
    OutputShape,
    ParamKind,
    ParamSpec,
    ToolRequest,
    ToolResult,
)
from p4_mcp.tools.catalog import CommandCatalog, UnknownCommand
from p4_mcp.tools.binder import BindingError, MissingArgument, OutOfRange, TypeMismatch, bind
from p4_mcp.tools.executor import (
    ExecutionStrategy,
    LaunchFailed,
    LiveStrategy,
    MockStrategy,
    StrategyFactory,
)
from p4_mcp.tools.normalizer import ResultNormalizer
from p4_mcp.tools.dispatcher import Dispatcher

__all__ = [
    "BoundArguments",
    "CommandSpec",
    "ExecutionMode",
    "ExecutionOutcome",
    "OutputShape",
    "ParamKind",
    "ParamSpec",
    "ToolRequest",
    "ToolResult",
    "CommandCatalog",
    "UnknownCommand",
    "BindingError",
    "MissingArgument",
    "OutOfRange",
    "TypeMismatch",
    "bind",
    "ExecutionStrategy",
    "LaunchFailed",
    "LiveStrategy",
    "MockStrategy",
    "StrategyFactory",
    "ResultNormalizer",
    "Dispatcher",
]

"""Dispatcher - runs one tool call from lookup to normalized result."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Optional

from p4_mcp.tools.binder import BindingError, bind
from p4_mcp.tools.catalog import CommandCatalog, UnknownCommand
from p4_mcp.tools.executor import ExecutionStrategy, LaunchFailed, StrategyFactory
from p4_mcp.tools.normalizer import ResultNormalizer
from p4_mcp.tools.schema import ExecutionMode, ToolRequest, ToolResult

logger = logging.getLogger(__name__)


class DispatchState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    EXECUTING = "executing"


class Dispatcher:
    """
    Orchestrates catalog lookup, argument binding, execution and
    normalization for one request at a time.

    The execution mode is fixed at construction; every call runs through
    the same strategy. Any per-request failure comes back as a failed
    :class:`ToolResult`, so the caller can keep serving.

    Example:
        >>> dispatcher = Dispatcher(CommandCatalog.default(), ExecutionMode.MOCK)
        >>> dispatcher.call("p4_opened").success
        True
    """

    def __init__(
        self,
        catalog: CommandCatalog,
        mode: ExecutionMode = ExecutionMode.LIVE,
        strategy: Optional[ExecutionStrategy] = None,
        normalizer: Optional[ResultNormalizer] = None,
        binary: str = "p4",
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Dispatcher.

        Args:
            catalog: Tools this dispatcher accepts.
            mode: Live or mock execution, resolved once at startup.
            strategy: Explicit strategy; built from ``mode`` when omitted.
                When given, its own mode wins over ``mode``.
            normalizer: Explicit normalizer; built from ``catalog`` when omitted.
            binary: p4 executable for live mode.
            timeout: Optional per-command timeout in seconds for live mode.
        """
        self.catalog = catalog
        self.strategy = strategy or StrategyFactory.create(mode, binary=binary, timeout=timeout)
        self.mode = self.strategy.mode
        self.normalizer = normalizer or ResultNormalizer(catalog)
        self.state = DispatchState.IDLE

    def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """Dispatch ``name`` with ``arguments``; shorthand for :meth:`dispatch`."""
        return self.dispatch(ToolRequest(name=name, arguments=dict(arguments or {})))

    def dispatch(self, request: ToolRequest) -> ToolResult:
        logger.debug("Dispatching %s (%s mode)", request.name, self.mode.value)
        try:
            return self._dispatch(request)
        finally:
            self.state = DispatchState.IDLE

    def _dispatch(self, request: ToolRequest) -> ToolResult:
        self.state = DispatchState.RESOLVING
        try:
            spec = self.catalog.lookup(request.name)
            bound = bind(spec, request.arguments)
        except (UnknownCommand, BindingError) as exc:
            logger.debug("Rejected %s: %s", request.name, exc)
            return ToolResult.failure(str(exc))

        self.state = DispatchState.EXECUTING
        try:
            outcome = self.strategy.execute(spec, bound)
        except LaunchFailed as exc:
            return ToolResult.failure(str(exc))

        return self.normalizer.normalize(spec.name, outcome)

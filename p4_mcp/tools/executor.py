"""
Execution strategies - run a bound tool call against p4 or a stand-in.

``LiveStrategy`` spawns the ``p4`` client; ``MockStrategy`` answers from
the canned output in :mod:`p4_mcp.tools.mock`. Both hand back an
:class:`ExecutionOutcome` the normalizer cannot tell apart by shape.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Type

from p4_mcp.tools.mock import render_mock_output
from p4_mcp.tools.schema import (
    BoundArguments,
    CommandSpec,
    ExecutionMode,
    ExecutionOutcome,
    ParamKind,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class LaunchFailed(Exception):
    """Raised when the p4 executable cannot be started at all."""

    def __init__(self, binary: str, reason: str):
        super().__init__(f"Failed to launch {binary}: {reason}")
        self.binary = binary
        self.reason = reason


def build_invocation(binary: str, spec: CommandSpec, bound: BoundArguments) -> List[str]:
    """
    Assemble the argv for ``spec``.

    Switch parameters come first in declared order, then positional ones.
    Booleans add their switch only when true; arrays expand to one token
    per item.
    """
    flags: List[str] = []
    positionals: List[str] = []
    for param in spec.params:
        if param.name not in bound:
            continue
        value = bound.get(param.name)
        if param.flag:
            if param.kind is ParamKind.BOOLEAN:
                if value:
                    flags.append(param.flag)
            else:
                flags.extend([param.flag, str(value)])
        elif param.kind is ParamKind.STRING_ARRAY:
            positionals.extend(value)
        elif param.kind is not ParamKind.BOOLEAN:
            positionals.append(str(value))
    return [binary, spec.subcommand, *flags, *positionals]


def no_files_outcome(spec: CommandSpec, bound: BoundArguments) -> Optional[ExecutionOutcome]:
    """Failed outcome for commands run with an empty file list, else None."""
    if spec.requires_files and not bound.get(spec.requires_files):
        return ExecutionOutcome.failed(f"p4 {spec.subcommand}: no files specified")
    return None


class ExecutionStrategy(ABC):
    """
    Abstract base class for the ways a tool call can be executed.

    Implementations must not raise for a command that ran and failed;
    that is a failed :class:`ExecutionOutcome`. Only a p4 that cannot be
    started raises :class:`LaunchFailed`.
    """

    mode: ExecutionMode

    @abstractmethod
    def execute(self, spec: CommandSpec, bound: BoundArguments) -> ExecutionOutcome:
        """
        Run one tool call.

        Args:
            spec: Catalog entry of the tool being called.
            bound: Arguments already validated against ``spec``.

        Returns:
            ExecutionOutcome with the command's text output.
        """
        pass


class LiveStrategy(ExecutionStrategy):
    """Runs the real ``p4`` client as a fresh child process per call."""

    mode = ExecutionMode.LIVE

    def __init__(
        self,
        binary: str = "p4",
        timeout: Optional[float] = None,
        runner: Optional[Runner] = None,
    ):
        self.binary = binary
        self.timeout = timeout
        self._runner = runner or subprocess.run

    def execute(self, spec: CommandSpec, bound: BoundArguments) -> ExecutionOutcome:
        rejected = no_files_outcome(spec, bound)
        if rejected is not None:
            return rejected

        argv = build_invocation(self.binary, spec, bound)
        logger.debug("Executing p4 command: %s", argv)

        try:
            completed = self._runner(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return ExecutionOutcome.failed(f"p4 {spec.subcommand} timed out after {self.timeout}s")
        except OSError as exc:
            # FileNotFoundError and PermissionError land here too
            logger.warning("Could not launch %s: %s", self.binary, exc)
            raise LaunchFailed(self.binary, exc.strerror or str(exc)) from exc
        except ValueError as exc:
            return ExecutionOutcome.failed(f"p4 {spec.subcommand}: invalid argument ({exc})")

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        if completed.returncode != 0:
            message = stderr.strip() or stdout.strip() or f"p4 exited with status {completed.returncode}"
            return ExecutionOutcome.failed(message, exit_code=completed.returncode, output=stdout)

        return ExecutionOutcome(
            success=True,
            exit_code=completed.returncode,
            output=stdout if stdout.strip() else stderr,
        )


class MockStrategy(ExecutionStrategy):
    """Answers every call with deterministic canned p4 output; never spawns."""

    mode = ExecutionMode.MOCK

    def execute(self, spec: CommandSpec, bound: BoundArguments) -> ExecutionOutcome:
        rejected = no_files_outcome(spec, bound)
        if rejected is not None:
            return rejected

        logger.debug("Mock executing p4 command: %s %s", spec.subcommand, bound.values)
        return ExecutionOutcome(success=True, exit_code=0, output=render_mock_output(spec, bound))


class StrategyFactory:
    """Factory for creating execution strategies by mode."""

    _strategies: Dict[ExecutionMode, Type[ExecutionStrategy]] = {
        ExecutionMode.LIVE: LiveStrategy,
        ExecutionMode.MOCK: MockStrategy,
    }

    @classmethod
    def create(
        cls,
        mode: ExecutionMode,
        binary: str = "p4",
        timeout: Optional[float] = None,
    ) -> ExecutionStrategy:
        """
        Create the strategy for ``mode``.

        Args:
            mode: Resolved execution mode.
            binary: p4 executable used by the live strategy.
            timeout: Optional per-command timeout in seconds (live only).

        Returns:
            A ready-to-use ExecutionStrategy.
        """
        strategy_class = cls._strategies.get(mode)
        if strategy_class is None:
            raise ValueError(f"No execution strategy for mode: {mode}")
        if issubclass(strategy_class, LiveStrategy):
            return strategy_class(binary=binary, timeout=timeout)
        return strategy_class()

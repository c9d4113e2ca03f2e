"""Data models for p4 tool definitions, requests, outcomes, and results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParamKind(str, Enum):
    """Argument kinds a tool parameter can declare."""

    STRING = "string"
    STRING_ARRAY = "array"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class OutputShape(str, Enum):
    """Structured shape the normalizer extracts from a command's output."""

    RAW = "raw"
    OPENED = "opened"  # p4 opened listing
    FILES = "files"  # "//depot/f#rev - detail" lines (sync/edit/add/revert)
    CHANGES = "changes"
    INFO = "info"
    SUBMIT = "submit"


class ExecutionMode(str, Enum):
    """Process-wide choice between spawning p4 and canned responses."""

    LIVE = "live"
    MOCK = "mock"


class ParamSpec(BaseModel):
    """A single parameter for a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ParamKind = ParamKind.STRING
    description: str = ""
    required: bool = False
    default: Optional[Any] = None
    flag: Optional[str] = None  # p4 switch token; None means positional
    minimum: Optional[int] = None  # lower bound for integer params

    def json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.kind.value, "description": self.description}
        if self.kind is ParamKind.STRING_ARRAY:
            schema["items"] = {"type": "string"}
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        return schema


class CommandSpec(BaseModel):
    """Catalog entry: one tool call and how it maps onto a p4 subcommand."""

    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "p4_opened"
    description: str
    subcommand: str  # e.g. "opened"
    params: List[ParamSpec] = Field(default_factory=list)
    shape: OutputShape = OutputShape.RAW
    requires_files: Optional[str] = None  # array param that must be non-empty to run

    @model_validator(mode="after")
    def _check_params(self) -> "CommandSpec":
        seen = set()
        for param in self.params:
            if param.name in seen:
                raise ValueError(f"Duplicate parameter '{param.name}' in tool {self.name}")
            seen.add(param.name)
        if self.requires_files and self.requires_files not in seen:
            raise ValueError(f"Tool {self.name} requires unknown parameter '{self.requires_files}'")
        return self

    def param(self, name: str) -> Optional[ParamSpec]:
        for param in self.params:
            if param.name == name:
                return param
        return None

    def input_schema(self) -> Dict[str, Any]:
        """JSON Schema advertised to clients via ``tools/list``."""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.params},
        }
        required = [p.name for p in self.params if p.required]
        if required:
            schema["required"] = required
        return schema

    def to_tool(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


class ToolRequest(BaseModel):
    """One incoming tool call, arguments still untyped."""

    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class BoundArguments(BaseModel):
    """Validated, typed view of a request's arguments."""

    command: str
    values: Dict[str, Any] = Field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self.values


class ExecutionOutcome(BaseModel):
    """Raw result of running (or mocking) one p4 command."""

    success: bool
    exit_code: Optional[int] = None
    output: str = ""  # text the command produced on success
    message: str = ""  # captured error text on failure
    payload: Optional[Dict[str, Any]] = None  # pre-structured data, skips parsing

    @classmethod
    def failed(cls, message: str, exit_code: Optional[int] = None, output: str = "") -> "ExecutionOutcome":
        return cls(success=False, exit_code=exit_code, output=output, message=message)


class ToolResult(BaseModel):
    """Uniform envelope returned for every tool call."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(success=False, message=message)

    def to_mcp(self) -> Dict[str, Any]:
        """Render as an MCP ``tools/call`` result."""
        result: Dict[str, Any] = {
            "content": [{"type": "text", "text": self.message}],
            "isError": not self.success,
        }
        if self.data is not None:
            result["structuredContent"] = self.data
        return result

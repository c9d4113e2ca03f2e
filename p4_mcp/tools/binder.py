"""Argument binding - validate and coerce raw tool-call arguments."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from p4_mcp.tools.schema import BoundArguments, CommandSpec, ParamKind, ParamSpec

TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off"}


class BindingError(Exception):
    """Raised when arguments do not satisfy a tool's parameters."""

    def __init__(self, param: str, message: str):
        super().__init__(message)
        self.param = param


class MissingArgument(BindingError):
    """A required parameter was not supplied."""

    def __init__(self, param: str):
        super().__init__(param, f"Missing required argument: {param}")


class TypeMismatch(BindingError):
    """A supplied value cannot be coerced to the parameter's kind."""

    def __init__(self, param: str, expected: ParamKind):
        super().__init__(param, f"Argument '{param}' must be of type {expected.value}")
        self.expected = expected


class OutOfRange(BindingError):
    """An integer value falls below the parameter's minimum."""

    def __init__(self, param: str, minimum: int):
        super().__init__(param, f"Argument '{param}' must be at least {minimum}")
        self.minimum = minimum


def bind(spec: CommandSpec, raw_arguments: Optional[Mapping[str, Any]]) -> BoundArguments:
    """
    Check ``raw_arguments`` against ``spec`` and return typed values.

    Required parameters must be present (``None`` counts as absent),
    present values are coerced to their declared kind, absent optional
    parameters take their default, and unknown keys are dropped.
    """
    if raw_arguments is None:
        raw_arguments = {}
    if not isinstance(raw_arguments, Mapping):
        raise BindingError("arguments", "Tool arguments must be an object")

    values: Dict[str, Any] = {}
    for param in spec.params:
        raw = raw_arguments.get(param.name)
        if raw is None:
            if param.required:
                raise MissingArgument(param.name)
            if param.default is not None:
                values[param.name] = param.default
            continue
        values[param.name] = _coerce(param, raw)

    return BoundArguments(command=spec.name, values=values)


def _coerce(param: ParamSpec, value: Any) -> Any:
    coerced = _COERCERS[param.kind](value)
    if coerced is None:
        raise TypeMismatch(param.name, param.kind)
    if param.minimum is not None and coerced < param.minimum:
        raise OutOfRange(param.name, param.minimum)
    return coerced


def _as_string(value: Any) -> Optional[str]:
    if isinstance(value, str):
        # NUL cannot appear in a process argument
        return None if "\x00" in value else value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_string_array(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    items: List[str] = []
    for item in value:
        text = _as_string(item)
        if text is None:
            return None
        items.append(text)
    return items


def _as_integer(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_boolean(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return None


_COERCERS = {
    ParamKind.STRING: _as_string,
    ParamKind.STRING_ARRAY: _as_string_array,
    ParamKind.INTEGER: _as_integer,
    ParamKind.BOOLEAN: _as_boolean,
}

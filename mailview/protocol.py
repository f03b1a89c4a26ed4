"""WebSocket protocol definitions for viewer <-> mailview communication."""

import json
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class Action(str, Enum):
    """Actions a viewer can request from the render service."""
    RENDER = "render"
    COUNT = "count"
    INSPECT = "inspect"
    STYLES = "styles"
    PING = "ping"


class Event(str, Enum):
    """Events the render service pushes to viewers."""
    CONNECTED = "connected"


@dataclass
class Request:
    """Request from a viewer."""
    id: str
    action: str
    params: dict[str, Any]

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_dict(cls, data: dict) -> "Request":
        return cls(
            id=str(data["id"]),
            action=data["action"],
            params=data.get("params") or {},
        )


@dataclass
class Response:
    """Response to a viewer request."""
    id: str
    ok: bool
    result: dict[str, Any] | None = None
    error: str | None = None

    def to_json(self) -> str:
        d = {"id": self.id, "ok": self.ok}
        if self.ok:
            d["result"] = self.result or {}
        else:
            d["error"] = self.error or "Unknown error"
        return json.dumps(d)

    @classmethod
    def from_dict(cls, data: dict) -> "Response":
        return cls(
            id=str(data["id"]),
            ok=data["ok"],
            result=data.get("result"),
            error=data.get("error"),
        )

    @classmethod
    def success(cls, request_id: str, result: dict[str, Any] | None = None) -> "Response":
        return cls(id=request_id, ok=True, result=result)

    @classmethod
    def failure(cls, request_id: str, error: str) -> "Response":
        return cls(id=request_id, ok=False, error=error)


@dataclass
class ServerEvent:
    """Server-initiated event pushed to viewers."""
    event: str
    data: dict[str, Any]

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_dict(cls, data: dict) -> "ServerEvent":
        return cls(
            event=data["event"],
            data=data.get("data", {}),
        )


# Accepted parameter types per action; unlisted actions take no parameters
PARAM_TYPES: dict[str, dict[str, tuple[type, ...]]] = {
    Action.RENDER.value: {"body": (str, type(None)), "allowRemote": (bool, type(None))},
    Action.COUNT.value: {"body": (str, type(None))},
    Action.INSPECT.value: {"body": (str, type(None))},
}


def validate_params(request: Request) -> str | None:
    """Check a request's parameters.

    Returns:
        An error message, or None if the parameters are acceptable
    """
    if not isinstance(request.params, dict):
        return "Parameters must be an object"
    for name, types in PARAM_TYPES.get(request.action, {}).items():
        if not isinstance(request.params.get(name), types):
            return f"Invalid parameter '{name}' for {request.action}"
    return None


def parse_message(raw: str) -> Request | Response | None:
    """Parse a JSON message into Request or Response."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None

    if not isinstance(data, dict) or "id" not in data:
        return None
    if "action" in data:
        return Request.from_dict(data)
    elif "ok" in data:
        return Response.from_dict(data)
    return None

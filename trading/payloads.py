# trading/payloads.py
from typing import Any

from trading.errors import MalformedResponseError


def envelope_data(payload: Any, kind: type, what: str) -> Any:
    """Return payload["data"] if it is of the expected type, else raise MalformedResponseError."""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, kind):
        raise MalformedResponseError(
            f"Unexpected {what} payload",
            expected=kind.__name__, actual=type(data).__name__,
        )
    return data


def to_float(x: Any, field: str = "") -> float:
    """Strict float from str/float/int; empty or garbage raises MalformedResponseError."""
    if isinstance(x, bool):
        raise MalformedResponseError("Boolean is not a number", field=field, actual=x)
    if isinstance(x, (int, float)):
        return float(x)
    s = str(x).strip() if x is not None else ""
    try:
        return float(s)
    except ValueError:
        raise MalformedResponseError("Not a number", field=field, actual=repr(x)) from None


def to_flag(x: Any) -> bool:
    if isinstance(x, str):
        return x.strip().lower() in ("true", "1", "yes")
    return bool(x)


def to_timestamp(x: Any) -> Any:
    """Epoch millis as int when numeric ("1700000000000", 1.7e12); anything else is kept raw."""
    if isinstance(x, bool) or x is None:
        return x
    try:
        return int(x)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(x))
    except (TypeError, ValueError, OverflowError):
        return x

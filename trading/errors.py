class TradingError(Exception):
    """Base trading error."""
    def __init__(self, msg: str = ""):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg or self.__class__.__name__


class TransportError(TradingError):
    """Network/HTTP failure while talking to the exchange."""


class FameexApiError(TransportError):
    """Wrapper for FameEX API error codes/messages."""
    def __init__(self, code: str, msg: str, payload: dict | None = None):
        super().__init__(f"FameEX[{code}]: {msg}")
        self.code = code
        self.payload = payload or {}


class MalformedResponseError(TradingError):
    """Payload shape is not what the endpoint is documented to return."""

    def __init__(self, msg: str = "", **ctx):
        super().__init__(msg)
        self.ctx = ctx

    def __str__(self):
        base = super().__str__()
        if self.ctx:
            details = ", ".join(f"{k}={v}" for k, v in self.ctx.items())
            return f"{base} [{details}]"
        return base


class MalformedPairError(TradingError, ValueError):
    """Pair string does not split into exactly two coins."""

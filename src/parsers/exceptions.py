class TokenRadarError(Exception):
    pass


class InvalidIdentifierError(TokenRadarError):
    """Address is not a valid base58 32-byte public key."""

    def __init__(self, value: str, kind: str = "address") -> None:
        self.value = value
        self.kind = kind
        super().__init__(f"Invalid {kind}: {value!r}")


class NotFoundError(TokenRadarError):
    pass


class NotAMintError(TokenRadarError):
    def __init__(self, address: str, program: str = "", account_type: str = "") -> None:
        self.address = address
        self.program = program
        self.account_type = account_type
        super().__init__(f"Account {address} is not an SPL mint")


class TransportError(TokenRadarError):
    """Network, HTTP or JSON-RPC failure talking to an upstream."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
        rpc_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.rpc_code = rpc_code
        super().__init__(message)


class ResourceLimitRejectedError(TransportError):
    """Upstream refused to finish a scan because the result set is too large."""


class FallbackFailedError(TokenRadarError):
    """Bounded fallback query failed after the full scan was rejected.

    Callers should treat this as retryable.
    """

    retryable = True

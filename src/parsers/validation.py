from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.exceptions import InvalidIdentifierError


def validate_pubkey(value: str | None, kind: str = "address") -> str:
    """Return the stripped base58 address or raise InvalidIdentifierError."""
    candidate = (value or "").strip()
    if not candidate:
        raise InvalidIdentifierError(candidate, kind)
    try:
        Pubkey.from_string(candidate)
    except ValueError as e:
        raise InvalidIdentifierError(candidate, kind) from e
    return candidate

"""Error taxonomy for the marketplace core.

Builds on ``protean.exceptions`` so command handlers can raise these inside a
UnitOfWork and have the whole unit rolled back before the error reaches the
caller. ``ValidationError`` and ``ObjectNotFoundError`` are used straight from
Protean; the classes below cover the remaining failure kinds. All of them
carry a ``messages`` dict keyed by field, like ``ValidationError``.
"""

from protean.exceptions import ProteanExceptionWithMessage


class ConflictError(ProteanExceptionWithMessage):
    """The request is well formed but conflicts with current state.

    Insufficient stock, a wrong confirmation code, or a courier who is
    already busy. The caller may retry with corrected input.
    """


class InsufficientStockError(ConflictError):
    """Not enough stock left to reserve the requested quantity."""


class DeliveryUnavailableError(ConflictError):
    """The delivery job was taken by another courier or is no longer open."""


class PermissionDeniedError(ProteanExceptionWithMessage):
    """The caller is not entitled to act on this order, store or delivery."""


class UpstreamError(ProteanExceptionWithMessage):
    """The payment provider failed or the seller has no provider credential."""


class DataIntegrityError(ProteanExceptionWithMessage):
    """Stored data does not have the expected shape."""


def error_message(exc: Exception) -> str:
    """Flatten an exception's ``messages`` into one human-readable line."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for value in messages.values():
            if isinstance(value, (list, tuple)):
                parts.extend(str(v) for v in value)
            else:
                parts.append(str(value))
        if parts:
            return "; ".join(parts)
    if messages:
        return str(messages)
    return str(exc)

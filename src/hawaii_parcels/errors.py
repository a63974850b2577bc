class ParcelServiceError(Exception):
    """Upstream feature-service problem. Never escapes ParcelQueryClient."""


class TransportError(ParcelServiceError):
    """Network failure, timeout or non-2xx response."""


class DecodeError(ParcelServiceError):
    """Body is not JSON or not shaped like a feature query response."""

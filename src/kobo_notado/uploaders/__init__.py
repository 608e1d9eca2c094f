"""HTTP clients for delivering highlights to remote services."""
from .notado import NotadoClient, NotadoError, RemoteRejectionError, TransportError

__all__ = ["NotadoClient", "NotadoError", "RemoteRejectionError", "TransportError"]

from .identity import RemoteIdentityClient

__all__ = ["RemoteIdentityClient"]

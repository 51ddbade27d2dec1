from .remote_store_protocol import RemoteStoreProtocol

__all__ = ["RemoteStoreProtocol"]

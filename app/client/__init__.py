from app.client.status_client import StatusClient, StatusClientError

__all__ = ["StatusClient", "StatusClientError"]

from typing import Optional


class DailySyncError(Exception):
    pass


class StoreError(DailySyncError):
    """Remote store call failed (network, auth or server side)."""
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AuthError(StoreError):
    pass


class ImportDocumentError(DailySyncError):
    pass

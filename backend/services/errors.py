"""
Prospect Tracker - Exceptions métier

Mapped to HTTP responses by the handlers registered in server.py.
"""


class ProspectError(Exception):
    """Base class for prospect errors reported to the caller"""
    status_code = 500
    message = "Server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ProspectNotFound(ProspectError):
    """Raised when an id does not resolve to a prospect"""
    status_code = 404
    message = "Not found"


class NoRecordsFound(ProspectError):
    """Raised when an export filter matches nothing"""
    status_code = 404
    message = "No records found"


class DeckUploadError(ProspectError):
    """Raised when the remote deck upload fails"""
    pass

"""
Typed errors raised by the store adapters and the data service.

Every error carries a machine-readable ``code`` next to its message so
callers (CLI, UI) can branch on the kind without parsing text:

    LandlordError
    +-- ConfigurationError            CONFIGURATION
    +-- ConnectivityError             CONNECTIVITY
    +-- NotConnectedError             NOT_CONNECTED
    +-- ReauthenticationRequiredError REAUTHENTICATION_REQUIRED
    +-- RecordNotFoundError           RECORD_NOT_FOUND
"""
from typing import Optional


class LandlordError(Exception):
    code: str = "LANDLORD_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(LandlordError):
    """A durable backend was requested but its settings are missing."""

    code = "CONFIGURATION"


class ConnectivityError(LandlordError):
    """The backend could not be reached or answered with an error."""

    code = "CONNECTIVITY"

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class NotConnectedError(LandlordError):
    """A write was attempted while the adapter is signed out."""

    code = "NOT_CONNECTED"


class ReauthenticationRequiredError(LandlordError):
    """The refresh token is gone or rejected; the user has to sign in again."""

    code = "REAUTHENTICATION_REQUIRED"


class RecordNotFoundError(LandlordError):
    code = "RECORD_NOT_FOUND"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} record {record_id} not found")

"""
Monobank Acquiring Client Exceptions

All exceptions raised by the acquiring client and the webhook verifier.
Every error carries status_code: the HTTP status for API failures,
500 for client-side failures.
"""
from typing import Optional


class MonoAcquiringError(Exception):
    """Base class for monobank acquiring errors"""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MonoArgumentError(MonoAcquiringError, ValueError):
    """Invalid or missing input, raised before any network call"""
    pass


class MonoTransportError(MonoAcquiringError):
    """Empty response or failed HTTP exchange (network error, timeout)"""
    pass


class MonoDecodeError(MonoAcquiringError):
    """Response body is not a JSON object"""
    pass


class MonoAPIError(MonoAcquiringError):
    """Non-200 response from the API"""

    def __init__(
        self,
        message: str,
        status_code: int,
        err_code: Optional[str] = None,
        err_text: Optional[str] = None,
        raw: Optional[str] = None,
    ):
        super().__init__(message, status_code)
        self.err_code = err_code
        self.err_text = err_text
        self.raw = raw


class MonoVerificationError(MonoAcquiringError):
    """Webhook signature cannot be checked (missing key/signature, malformed key)"""
    pass


class MonoPublicKeyError(MonoVerificationError):
    """Public key is present but can not be loaded (not base64, not a key, not EC/RSA)"""
    pass

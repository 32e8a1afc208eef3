"""
Domain-specific exceptions for alipay_gateway.
All exceptions are explicit and carry meaningful context.
"""

from typing import Optional


class AlipayError(Exception):
    """Base exception for all alipay_gateway errors."""
    pass


class KeyFormatError(AlipayError):
    """Raised when PEM framing or key bytes cannot be decoded."""
    pass


class EncodingError(AlipayError):
    """Raised when a signature is not valid base64."""
    pass


class CryptoError(AlipayError):
    """Raised when a sign, verify, encrypt or decrypt primitive fails."""
    pass


class SignatureInvalidError(CryptoError):
    """
    Raised when a signature does not match the signed material.

    When raised while checking a gateway response, ``status_code`` holds the
    HTTP status of that response so a bad signature on a 200 can be told apart
    from a transport failure.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(AlipayError):
    """Raised when the HTTP exchange with the gateway fails."""
    pass


class DecodeError(AlipayError):
    """Raised when a response body cannot be decoded into the expected shape."""
    pass


class ConfigError(AlipayError):
    """Raised when a required dependency is missing or misconfigured."""
    pass


class InvalidCallError(AlipayError):
    """Raised when an API call description is malformed."""
    pass


class UnsignedRequestWarning(UserWarning):
    """Emitted when there is nothing to sign and an empty signature is produced."""
    pass

"""
Request signing and response signature verification.

Two algorithms are supported, ``RSA`` (SHA-1) and ``RSA2`` (SHA-256), both
RSA PKCS#1 v1.5 over the canonical string.
"""

import base64
import binascii
import logging
import warnings
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Sequence

from ..config import SIGN_TYPE_RSA, SIGN_TYPE_RSA2
from ..errors import ConfigError, EncodingError, UnsignedRequestWarning
from ..keys.keypair import KeyPair
from .canonical import build_canonical_string

_logger = logging.getLogger(__name__)


class SignType(str, Enum):
    """Signature algorithm identifier carried in the ``sign_type`` field."""

    RSA = SIGN_TYPE_RSA
    RSA2 = SIGN_TYPE_RSA2

    @property
    def hash_name(self) -> str:
        return "sha1" if self is SignType.RSA else "sha256"

    @classmethod
    def from_field(cls, value: Optional[str]) -> 'SignType':
        """Resolve a declared ``sign_type``; anything but ``RSA`` means RSA2."""
        return cls.RSA if value == SIGN_TYPE_RSA else cls.RSA2

    @classmethod
    def parse(cls, value) -> 'SignType':
        """
        Resolve a configured sign type exactly (``RSA`` or ``RSA2``).
        
        Raises:
            ConfigError: If value is not a supported sign type
        """
        try:
            return cls(value)
        except ValueError:
            raise ConfigError(f"Unsupported sign type: {value!r}")


class Signer(Protocol):
    """Capabilities the client needs from a signature algorithm."""

    @property
    def sign_type(self) -> SignType: ...

    def sign(self, keys: Optional[Sequence[str]], params: Optional[Mapping[str, Any]]) -> str: ...

    def can_verify(self) -> bool: ...

    def verify_response_data(self, data: bytes, sign: str) -> None: ...


def decode_signature(sign: str) -> bytes:
    """
    Decode a base64 signature.
    
    Raises:
        EncodingError: If the signature is not valid base64
    """
    try:
        return base64.b64decode(sign, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Malformed base64 signature: {e}") from e


class RSASigner:
    """
    RSA PKCS#1 v1.5 signer bound to one SignType and one KeyPair.
    """
    
    def __init__(self, sign_type: SignType, key_pair: KeyPair):
        """
        Initialize signer.
        
        Args:
            sign_type: RSA or RSA2
            key_pair: Key material to sign and verify with
            
        Raises:
            ConfigError: If key_pair is missing or sign_type is unsupported
        """
        if key_pair is None:
            raise ConfigError("KeyPair is required")
        self._sign_type = SignType.parse(sign_type)
        self._key_pair = key_pair
    
    @property
    def sign_type(self) -> SignType:
        return self._sign_type
    
    @property
    def key_pair(self) -> KeyPair:
        return self._key_pair
    
    def sign(
        self,
        keys: Optional[Sequence[str]],
        params: Optional[Mapping[str, Any]],
    ) -> str:
        """
        Sign the canonical string of ``params`` over ``keys``.
        
        Args:
            keys: Parameter names, sorted ascending
            params: Parameter mapping
            
        Returns:
            Base64 signature, or ``""`` when there is nothing to sign
            
        Raises:
            CryptoError: If the RSA operation fails
        """
        if not keys or not params:
            _logger.warning("Nothing to sign; returning an empty %s signature", self._sign_type.value)
            warnings.warn(
                "No keys or parameters supplied; request will carry an empty signature",
                UnsignedRequestWarning,
                stacklevel=2,
            )
            return ""
        
        canonical = build_canonical_string(keys, params)
        signature = self._key_pair.sign_pkcs1v15(
            canonical.encode('utf-8'),
            self._sign_type.hash_name,
        )
        return base64.b64encode(signature).decode('ascii')
    
    def can_verify(self) -> bool:
        return self._key_pair.can_verify()
    
    def verify(self, data: bytes, signature: bytes):
        """
        Verify raw signature bytes over ``data``.
        
        Raises:
            SignatureInvalidError: If the signature does not match
            CryptoError: If no public key is loaded
        """
        self._key_pair.verify_pkcs1v15(data, signature, self._sign_type.hash_name)
    
    def verify_response_data(self, data: bytes, sign: str):
        """
        Verify a base64 signature over response bytes.
        
        Raises:
            EncodingError: If ``sign`` is not valid base64
            SignatureInvalidError: If the signature does not match
        """
        self.verify(data, decode_signature(sign))
    
    def __repr__(self) -> str:
        return f"RSASigner({self._sign_type.value}, can_verify={self.can_verify()})"


class SignerRegistry:
    """
    Explicit mapping from SignType to signer, owned by one client.
    """
    
    def __init__(self, key_pairs: Mapping[SignType, KeyPair]):
        """
        Initialize registry.
        
        Args:
            key_pairs: KeyPair per sign type
            
        Raises:
            ConfigError: If no key pair is given or a sign type is unsupported
        """
        if not key_pairs:
            raise ConfigError("SignerRegistry needs at least one KeyPair")
        
        self._signers: Dict[SignType, RSASigner] = {}
        for sign_type, key_pair in key_pairs.items():
            sign_type = SignType.parse(sign_type)
            self._signers[sign_type] = RSASigner(sign_type, key_pair)
    
    @classmethod
    def for_key_pair(
        cls,
        key_pair: KeyPair,
        sign_types: Iterable[SignType] = (SignType.RSA, SignType.RSA2),
    ) -> 'SignerRegistry':
        """Register the same KeyPair for every sign type."""
        if key_pair is None:
            raise ConfigError("KeyPair is required")
        return cls({SignType.parse(t): key_pair for t in sign_types})
    
    def get(self, sign_type: SignType) -> RSASigner:
        """
        Get the signer for a sign type.
        
        Raises:
            ConfigError: If the sign type is not registered
        """
        try:
            return self._signers[SignType.parse(sign_type)]
        except KeyError:
            raise ConfigError(f"No signer registered for sign type {sign_type!r}")
    
    def __contains__(self, sign_type) -> bool:
        try:
            return SignType(sign_type) in self._signers
        except ValueError:
            return False
    
    @property
    def sign_types(self) -> frozenset:
        return frozenset(self._signers)

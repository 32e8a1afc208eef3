"""
RSA key material loading.
The private key signs requests and decrypts; the optional public key is the
gateway's key and verifies responses and encrypts.
"""

import re
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..config import DEFAULT_KEY_SIZE, PUBLIC_EXPONENT
from ..errors import CryptoError, KeyFormatError, SignatureInvalidError
from ..utils.hashing import get_hash_algorithm


PemData = Union[bytes, str]

_PEM_BLOCK = re.compile(
    rb'-----BEGIN ([A-Z0-9 ]+)-----\s+[A-Za-z0-9+/=\s]+?-----END \1-----'
)


class PrivateKeyEncoding(Enum):
    """Wire encoding of a PEM private key."""

    PKCS1 = "RSA PRIVATE KEY"
    PKCS8 = "PRIVATE KEY"

    @classmethod
    def from_mode(cls, mode: int) -> 'PrivateKeyEncoding':
        """Map the numeric selector (8 = PKCS#8, anything else PKCS#1)."""
        return cls.PKCS8 if mode == 8 else cls.PKCS1

    @property
    def pem_label(self) -> str:
        return self.value


def _to_bytes(data: PemData) -> bytes:
    if isinstance(data, str):
        return data.encode('ascii', errors='replace')
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    raise KeyFormatError(f"Expected PEM bytes or str, got {type(data)}")


def _pem_block(data: bytes, what: str) -> tuple:
    """Return (label, block_bytes) of the first PEM block."""
    match = _PEM_BLOCK.search(data)
    if match is None:
        raise KeyFormatError(f"PEM decode failed for {what}")
    return match.group(1).decode('ascii'), match.group(0)


def load_private_key(
    pem_data: PemData,
    encoding: PrivateKeyEncoding = PrivateKeyEncoding.PKCS1,
) -> rsa.RSAPrivateKey:
    """
    Load an RSA private key from PEM.
    
    Args:
        pem_data: PEM-encoded private key
        encoding: Expected private key encoding
        
    Returns:
        RSAPrivateKey object
        
    Raises:
        KeyFormatError: If the PEM or key is invalid
    """
    label, block = _pem_block(_to_bytes(pem_data), "private key")
    if label != encoding.pem_label:
        raise KeyFormatError(
            f"Expected {encoding.name} private key, got PEM block '{label}'"
        )
    
    try:
        private_key = serialization.load_pem_private_key(block, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Invalid private key: {e}") from e
    
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyFormatError("PEM does not contain an RSA private key")
    return private_key


def load_public_key(pem_data: PemData) -> rsa.RSAPublicKey:
    """
    Load an RSA public key from PKIX PEM.
    
    Raises:
        KeyFormatError: If the PEM or key is invalid
    """
    _, block = _pem_block(_to_bytes(pem_data), "public key")
    
    try:
        public_key = serialization.load_pem_public_key(block)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Invalid public key: {e}") from e
    
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyFormatError("PEM does not contain an RSA public key")
    return public_key


class KeyPair:
    """
    Merchant private key plus the optional gateway public key.
    """
    
    def __init__(
        self,
        private_key: rsa.RSAPrivateKey,
        public_key: Optional[rsa.RSAPublicKey] = None,
    ):
        """
        Initialize keypair.
        
        Args:
            private_key: RSA private key used for signing and decryption
            public_key: Optional RSA public key used for verification and encryption
        """
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise KeyFormatError("Invalid private key type")
        if public_key is not None and not isinstance(public_key, rsa.RSAPublicKey):
            raise KeyFormatError("Invalid public key type")
        
        self._private_key = private_key
        self._public_key = public_key
    
    @classmethod
    def from_pem(
        cls,
        private_pem: PemData,
        public_pem: Optional[PemData] = None,
        encoding: PrivateKeyEncoding = PrivateKeyEncoding.PKCS1,
    ) -> 'KeyPair':
        """
        Load keypair from PEM data.
        
        Args:
            private_pem: PEM-encoded private key
            public_pem: Optional PEM-encoded PKIX public key
            encoding: Private key encoding
            
        Returns:
            KeyPair instance
            
        Raises:
            KeyFormatError: If either PEM is invalid
        """
        private_key = load_private_key(private_pem, encoding)
        public_key = load_public_key(public_pem) if public_pem is not None else None
        return cls(private_key, public_key)
    
    @classmethod
    def load_from_files(
        cls,
        private_path: str,
        public_path: Optional[str] = None,
        encoding: PrivateKeyEncoding = PrivateKeyEncoding.PKCS1,
    ) -> 'KeyPair':
        """
        Load keypair from PEM files.
        
        Raises:
            KeyFormatError: If a file cannot be read or is invalid
        """
        try:
            private_pem = Path(private_path).read_bytes()
            public_pem = Path(public_path).read_bytes() if public_path else None
        except OSError as e:
            raise KeyFormatError(f"Cannot read key file: {e}") from e
        return cls.from_pem(private_pem, public_pem, encoding)
    
    @classmethod
    def generate(cls, key_size: int = DEFAULT_KEY_SIZE, with_public: bool = True) -> 'KeyPair':
        """
        Generate a new RSA keypair whose public half is its own public key.
        
        Args:
            key_size: Modulus size in bits
            with_public: Whether to attach the public key for verification
        """
        private_key = rsa.generate_private_key(
            public_exponent=PUBLIC_EXPONENT,
            key_size=key_size,
        )
        return cls(private_key, private_key.public_key() if with_public else None)
    
    def get_private_pem(
        self,
        encoding: PrivateKeyEncoding = PrivateKeyEncoding.PKCS1,
    ) -> bytes:
        """
        Export private key as PEM.
        WARNING: Handle with extreme care.
        """
        private_format = (
            serialization.PrivateFormat.PKCS8
            if encoding is PrivateKeyEncoding.PKCS8
            else serialization.PrivateFormat.TraditionalOpenSSL
        )
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=private_format,
            encryption_algorithm=serialization.NoEncryption(),
        )
    
    def get_public_pem(self) -> bytes:
        """
        Export the attached public key as PKIX PEM.
        
        Raises:
            CryptoError: If no public key is attached
        """
        return self.require_public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    
    def can_verify(self) -> bool:
        """Whether a public key is loaded for verification and encryption."""
        return self._public_key is not None
    
    def require_public_key(self) -> rsa.RSAPublicKey:
        if self._public_key is None:
            raise CryptoError("No public key loaded; verification is unavailable")
        return self._public_key
    
    def sign_pkcs1v15(self, data: bytes, hash_name: str) -> bytes:
        """
        Hash ``data`` and sign the digest with RSA PKCS#1 v1.5.
        
        Raises:
            CryptoError: If signing fails
        """
        try:
            return self._private_key.sign(
                data,
                padding.PKCS1v15(),
                get_hash_algorithm(hash_name),
            )
        except (ValueError, TypeError) as e:
            raise CryptoError(f"Signing failed: {e}") from e
    
    def verify_pkcs1v15(self, data: bytes, signature: bytes, hash_name: str):
        """
        Verify an RSA PKCS#1 v1.5 signature over ``data``.
        
        Raises:
            SignatureInvalidError: If the signature does not match
            CryptoError: If no public key is loaded
        """
        public_key = self.require_public_key()
        try:
            public_key.verify(
                signature,
                data,
                padding.PKCS1v15(),
                get_hash_algorithm(hash_name),
            )
        except InvalidSignature:
            raise SignatureInvalidError("Invalid signature")
    
    def encrypt(self, plaintext: bytes) -> bytes:
        """Chunked-encrypt with the attached public key."""
        from .cipher import encrypt
        return encrypt(plaintext, self.require_public_key())
    
    def decrypt(self, ciphertext: bytes) -> bytes:
        """Chunked-decrypt with the private key."""
        from .cipher import decrypt
        return decrypt(ciphertext, self._private_key)
    
    @property
    def key_size(self) -> int:
        """Private key modulus size in bits."""
        return self._private_key.key_size
    
    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        """Get private key object (for signing)."""
        return self._private_key
    
    @property
    def public_key(self) -> Optional[rsa.RSAPublicKey]:
        """Get public key object (for verification)."""
        return self._public_key


def load_key_pair(
    private_pem: PemData,
    public_pem: Optional[PemData] = None,
    encoding: Union[PrivateKeyEncoding, int] = PrivateKeyEncoding.PKCS1,
) -> KeyPair:
    """
    Parse PEM key material into a KeyPair.
    
    Args:
        private_pem: PEM-encoded private key
        public_pem: Optional PEM-encoded PKIX public key of the gateway
        encoding: PrivateKeyEncoding, or the numeric selector (8 = PKCS#8)
        
    Returns:
        KeyPair instance
        
    Raises:
        KeyFormatError: If any key material is invalid
    """
    if not isinstance(encoding, PrivateKeyEncoding):
        encoding = PrivateKeyEncoding.from_mode(encoding)
    return KeyPair.from_pem(private_pem, public_pem, encoding)

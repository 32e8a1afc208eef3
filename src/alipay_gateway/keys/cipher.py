"""
Chunked RSA PKCS#1 v1.5 encryption.

RSA can only encrypt up to ``key_bytes - 11`` bytes at a time, so payloads are
split into blocks, each block is encrypted independently and the ciphertext
blocks are concatenated. Ciphertext blocks are always ``key_bytes`` long.
"""

from typing import List, Union

from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..config import PKCS1V15_PADDING_OVERHEAD
from ..errors import CryptoError
from .keypair import PemData, PrivateKeyEncoding, load_private_key, load_public_key


PublicKeyLike = Union[rsa.RSAPublicKey, PemData]
PrivateKeyLike = Union[rsa.RSAPrivateKey, PemData]


def split_blocks(data: bytes, block_size: int) -> List[bytes]:
    """
    Split data into consecutive blocks of at most ``block_size`` bytes.
    
    Args:
        data: Bytes to split
        block_size: Maximum block length
        
    Returns:
        List of blocks; input no longer than block_size is a single block
    """
    if block_size <= 0:
        raise ValueError(f"Invalid block size: {block_size}")
    
    if len(data) <= block_size:
        return [bytes(data)]
    return [bytes(data[i:i + block_size]) for i in range(0, len(data), block_size)]


def encrypt_block_size(public_key: rsa.RSAPublicKey) -> int:
    """Largest plaintext block a key can encrypt."""
    return public_key.key_size // 8 - PKCS1V15_PADDING_OVERHEAD


def decrypt_block_size(private_key: rsa.RSAPrivateKey) -> int:
    """Ciphertext block length for a key."""
    return private_key.key_size // 8


def _as_public_key(key: PublicKeyLike) -> rsa.RSAPublicKey:
    if isinstance(key, rsa.RSAPublicKey):
        return key
    return load_public_key(key)


def _as_private_key(key: PrivateKeyLike, encoding: PrivateKeyEncoding) -> rsa.RSAPrivateKey:
    if isinstance(key, rsa.RSAPrivateKey):
        return key
    return load_private_key(key, encoding)


def encrypt(plaintext: bytes, public_key: PublicKeyLike) -> bytes:
    """
    Encrypt data of any length with RSA PKCS#1 v1.5.
    
    Args:
        plaintext: Data to encrypt
        public_key: RSAPublicKey or PKIX PEM
        
    Returns:
        Concatenated ciphertext blocks (empty for empty input)
        
    Raises:
        KeyFormatError: If the PEM key is invalid
        CryptoError: If any block fails to encrypt
    """
    key = _as_public_key(public_key)
    if not plaintext:
        return b""
    
    blocks = split_blocks(plaintext, encrypt_block_size(key))
    
    ciphertext = bytearray()
    for index, block in enumerate(blocks):
        try:
            ciphertext += key.encrypt(block, padding.PKCS1v15())
        except ValueError as e:
            raise CryptoError(f"Encryption failed at block {index}: {e}") from e
    return bytes(ciphertext)


def decrypt(
    ciphertext: bytes,
    private_key: PrivateKeyLike,
    encoding: PrivateKeyEncoding = PrivateKeyEncoding.PKCS1,
) -> bytes:
    """
    Decrypt data produced by encrypt().
    
    A ciphertext of the wrong length always fails. A full-size block with
    bad padding may not: OpenSSL builds with implicit rejection return
    random-looking bytes instead of raising. Authenticate the plaintext
    separately.
    
    Args:
        ciphertext: Concatenated ciphertext blocks
        private_key: RSAPrivateKey or PEM
        encoding: Private key encoding when a PEM is given
        
    Returns:
        Plaintext (empty for empty input)
        
    Raises:
        KeyFormatError: If the PEM key is invalid
        CryptoError: If any block fails to decrypt (see above for padding errors)
    """
    key = _as_private_key(private_key, encoding)
    if not ciphertext:
        return b""
    
    blocks = split_blocks(ciphertext, decrypt_block_size(key))
    
    plaintext = bytearray()
    for index, block in enumerate(blocks):
        try:
            plaintext += key.decrypt(block, padding.PKCS1v15())
        except ValueError as e:
            raise CryptoError(f"Decryption failed at block {index}: {e}") from e
    return bytes(plaintext)

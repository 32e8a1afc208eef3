"""Key material and chunked RSA encryption for alipay_gateway."""

from .keypair import (
    KeyPair,
    PrivateKeyEncoding,
    load_key_pair,
    load_private_key,
    load_public_key,
)
from .cipher import encrypt, decrypt, split_blocks

__all__ = [
    'KeyPair',
    'PrivateKeyEncoding',
    'load_key_pair',
    'load_private_key',
    'load_public_key',
    'encrypt',
    'decrypt',
    'split_blocks',
]

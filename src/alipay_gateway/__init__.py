"""
alipay_gateway - Alipay open-platform gateway client

Builds signed requests, sends them and verifies signed responses using
RSA PKCS#1 v1.5 (``RSA`` = SHA-1, ``RSA2`` = SHA-256).

Main exports:
- AlipayClient: Gateway client
- KeyPair: RSA key material
- SignerRegistry: Signers per sign type
- BizContentCall: Generic API call description
"""

from .client import AlipayClient
from .keys import KeyPair, PrivateKeyEncoding, load_key_pair, encrypt, decrypt
from .signing import SignerRegistry, SignType, RSASigner, verify_notification, parse_notification_body
from .api import APICall, BizContentCall, APIResponse
from .errors import *
from .config import *

__version__ = "0.1.0"

__all__ = [
    'AlipayClient',
    'KeyPair',
    'PrivateKeyEncoding',
    'load_key_pair',
    'encrypt',
    'decrypt',
    'SignerRegistry',
    'SignType',
    'RSASigner',
    'verify_notification',
    'parse_notification_body',
    'APICall',
    'BizContentCall',
    'APIResponse',
]

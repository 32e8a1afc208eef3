"""Canonical signing and verification for alipay_gateway."""

from .canonical import build_canonical_string, build_notification_string, sorted_keys
from .signer import RSASigner, Signer, SignerRegistry, SignType, decode_signature
from .notification import parse_notification_body, verify_notification

__all__ = [
    'build_canonical_string',
    'build_notification_string',
    'sorted_keys',
    'RSASigner',
    'Signer',
    'SignerRegistry',
    'SignType',
    'decode_signature',
    'parse_notification_body',
    'verify_notification',
]

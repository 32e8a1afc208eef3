"""
Verification of asynchronous notifications pushed by the gateway.
"""

import logging
from typing import Any, Dict, List, Mapping, Union
from urllib.parse import parse_qs

from ..config import SIGN_FIELD, SIGN_TYPE_FIELD
from .canonical import build_notification_string, first_value
from .signer import SignerRegistry, SignType, decode_signature

_logger = logging.getLogger(__name__)


def parse_notification_body(body: Union[bytes, str]) -> Dict[str, List[str]]:
    """
    Parse a posted ``application/x-www-form-urlencoded`` body.
    
    Args:
        body: Raw request body
        
    Returns:
        Mapping of field name to its list of values, blank values kept
    """
    if isinstance(body, bytes):
        body = body.decode('utf-8')
    return parse_qs(body, keep_blank_values=True)


def verify_notification(registry: SignerRegistry, form: Mapping[str, Any]) -> bool:
    """
    Verify the signature of a notification's posted form fields.
    
    The canonical string is rebuilt from every non-empty field except ``sign``
    and ``sign_type``, and checked with the registered signer matching the
    declared ``sign_type``.
    
    Args:
        registry: Signers of the receiving client
        form: Posted form fields (single or multi-valued)
        
    Returns:
        True if the signature is valid or verification is unavailable
        
    Raises:
        EncodingError: If ``sign`` is not valid base64
        SignatureInvalidError: If the signature does not match
        ConfigError: If no signer is registered for the declared type
    """
    signature = decode_signature(first_value(form.get(SIGN_FIELD)))
    sign_type = SignType.from_field(first_value(form.get(SIGN_TYPE_FIELD)))
    
    signer = registry.get(sign_type)
    if not signer.can_verify():
        _logger.warning(
            "Notification signature not checked: no public key loaded for %s",
            sign_type.value,
        )
        return True
    
    canonical = build_notification_string(form)
    signer.verify(canonical.encode('utf-8'), signature)
    _logger.debug("Notification signature verified (%s)", sign_type.value)
    return True

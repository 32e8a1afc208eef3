"""
Gateway response verification and decoding.

A response body is a JSON object holding the payload node
``<method with '.' replaced by '_'>_response`` and a sibling ``sign`` whose
signature covers the payload node's raw text.
"""

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type, TypeVar, Union

from ..config import RESPONSE_SUFFIX, SIGN_FIELD, SUCCESS_CODE
from ..errors import DecodeError, SignatureInvalidError
from ..signing.signer import Signer
from ..utils.raw_json import get_raw_member, get_string_member

_logger = logging.getLogger(__name__)

T = TypeVar('T')
ResultType = Union[Type[T], Callable[[Dict[str, Any]], T]]


def payload_node_name(api_name: str) -> str:
    """
    Name of the response payload node for a method.
    
    ``alipay.trade.query`` -> ``alipay_trade_query_response``
    """
    return api_name.replace('.', '_') + RESPONSE_SUFFIX


def decode_body_text(body: bytes) -> str:
    """
    Raises:
        DecodeError: If body is not UTF-8
    """
    try:
        return body.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DecodeError(f"Response body is not UTF-8: {e}") from e


def verify_response(
    signer: Signer,
    api_name: str,
    body: bytes,
    status_code: Optional[int] = None,
):
    """
    Verify the signature over a response's payload node.
    
    Args:
        signer: Signer able to verify
        api_name: Gateway method the response belongs to
        body: Raw response body
        status_code: HTTP status, attached to signature errors
        
    Raises:
        DecodeError: If the body is not a JSON object
        EncodingError: If ``sign`` is not valid base64
        SignatureInvalidError: If the payload node is missing or the signature does not match
    """
    text = decode_body_text(body)
    node_name = payload_node_name(api_name)
    
    try:
        payload = get_raw_member(text, node_name)
        sign = get_string_member(text, SIGN_FIELD)
    except ValueError as e:
        raise DecodeError(f"Response body is not a JSON object: {e}") from e
    
    if payload is None:
        _logger.error("Response (HTTP %s) has no %s node", status_code, node_name)
        raise SignatureInvalidError(
            f"Response has no '{node_name}' node to verify",
            status_code=status_code,
        )
    
    try:
        signer.verify_response_data(payload.encode('utf-8'), sign)
    except SignatureInvalidError as e:
        _logger.error("Response signature invalid for %s (HTTP %s)", api_name, status_code)
        raise SignatureInvalidError(str(e), status_code=status_code) from e


def decode_response(body: bytes, result_type: Optional[ResultType] = None) -> Any:
    """
    Decode a response body into a caller-chosen shape.
    
    Args:
        body: Raw response body
        result_type: None for a plain dict; a dataclass, built from the
            top-level members matching its fields; or any callable taking
            the parsed dict
        
    Returns:
        Decoded result
        
    Raises:
        DecodeError: If the body cannot be decoded into result_type
    """
    try:
        data = json.loads(decode_body_text(body))
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON response: {e}") from e
    
    if not isinstance(data, dict):
        raise DecodeError("Response body is not a JSON object")
    if result_type is None:
        return data
    
    try:
        if dataclasses.is_dataclass(result_type) and isinstance(result_type, type):
            names = {f.name for f in dataclasses.fields(result_type) if f.init}
            return result_type(**{k: v for k, v in data.items() if k in names})
        return result_type(data)
    except (TypeError, ValueError, KeyError) as e:
        raise DecodeError(f"Cannot decode response into {result_type!r}: {e}") from e


@dataclass
class APIResponse:
    """
    Generic view of a gateway response.
    """
    
    node_name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    sign: str = ""
    
    @classmethod
    def for_method(cls, api_name: str) -> Callable[[Dict[str, Any]], 'APIResponse']:
        """Decoder for use as ``result_type`` in AlipayClient.execute()."""
        node_name = payload_node_name(api_name)
        
        def decode(data: Dict[str, Any]) -> 'APIResponse':
            payload = data.get(node_name)
            if payload is None:
                payload = data.get("error_response", {})
            if not isinstance(payload, dict):
                raise ValueError(f"'{node_name}' is not an object")
            return cls(node_name=node_name, payload=payload, sign=data.get(SIGN_FIELD, ""))
        
        return decode
    
    @property
    def code(self) -> str:
        return str(self.payload.get("code", ""))
    
    @property
    def msg(self) -> str:
        return str(self.payload.get("msg", ""))
    
    @property
    def sub_code(self) -> str:
        return str(self.payload.get("sub_code", ""))
    
    @property
    def sub_msg(self) -> str:
        return str(self.payload.get("sub_msg", ""))
    
    def is_success(self) -> bool:
        return self.code == SUCCESS_CODE

"""API call descriptions and response handling for alipay_gateway."""

from .call import APICall, BizContentCall
from .response import APIResponse, decode_response, payload_node_name, verify_response

__all__ = [
    'APICall',
    'BizContentCall',
    'APIResponse',
    'decode_response',
    'payload_node_name',
    'verify_response',
]

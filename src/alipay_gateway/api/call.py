"""
API call descriptions.

A call names the gateway method, an optional extension parameter (usually
``biz_content`` carrying a JSON document) and any further method-specific
fields such as ``notify_url`` or ``app_auth_token``.
"""

import json
from typing import Any, Dict, Optional, Union

from ..config import DEFAULT_EXT_PARAM_NAME, JSON_ENSURE_ASCII, JSON_SEPARATORS
from ..errors import InvalidCallError


class APICall:
    """
    Base class for gateway calls.
    Subclasses must implement api_name().
    """
    
    def api_name(self) -> str:
        """Gateway method name, e.g. ``alipay.trade.query``."""
        raise NotImplementedError
    
    def ext_param_name(self) -> str:
        """Name of the extension parameter, or ``""`` for none."""
        return ""
    
    def ext_param_value(self) -> str:
        return ""
    
    def params(self) -> Dict[str, str]:
        """Additional method-specific fields."""
        return {}


def to_compact_json(value: Any) -> str:
    """
    Serialize a biz_content document compactly.
    
    Raises:
        InvalidCallError: If value is not JSON-serializable
    """
    try:
        return json.dumps(
            value,
            separators=JSON_SEPARATORS,
            ensure_ascii=JSON_ENSURE_ASCII,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise InvalidCallError(f"biz_content not JSON-serializable: {e}") from e


class BizContentCall(APICall):
    """
    Generic call carrying a ``biz_content`` document.
    """
    
    def __init__(
        self,
        method: str,
        biz_content: Optional[Union[Dict[str, Any], str]] = None,
        params: Optional[Dict[str, Any]] = None,
        ext_param_name: str = DEFAULT_EXT_PARAM_NAME,
    ):
        """
        Initialize call.
        
        Args:
            method: Gateway method name
            biz_content: Document as a dict, or an already serialized string
            params: Additional fields; None values are dropped
            ext_param_name: Name of the extension parameter
            
        Raises:
            InvalidCallError: If method is empty
        """
        if not method or not isinstance(method, str):
            raise InvalidCallError("API method name is required")
        
        self.method = method
        self.biz_content = biz_content
        self.extra_params = dict(params or {})
        self._ext_param_name = ext_param_name if biz_content is not None else ""
    
    def api_name(self) -> str:
        return self.method
    
    def ext_param_name(self) -> str:
        return self._ext_param_name
    
    def ext_param_value(self) -> str:
        if self.biz_content is None:
            return ""
        if isinstance(self.biz_content, str):
            return self.biz_content
        return to_compact_json(self.biz_content)
    
    def params(self) -> Dict[str, str]:
        return {
            key: str(value)
            for key, value in self.extra_params.items()
            if value is not None
        }
    
    def __repr__(self) -> str:
        return f"BizContentCall({self.method!r})"

"""
alipay_gateway public API - Alipay open-platform gateway client.

This is the main entry point: it assembles and signs request parameters,
performs the HTTP exchange and verifies and decodes the gateway response.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

import requests

from .api.call import APICall
from .api.response import ResultType, decode_response, verify_response
from .config import (
    CHARSET,
    CONTENT_TYPE,
    FORMAT,
    PRODUCTION_API_URL,
    SANDBOX_API_URL,
    SIGN_FIELD,
    VERSION,
)
from .errors import ConfigError, InvalidCallError, TransportError
from .keys.keypair import KeyPair
from .signing.canonical import sorted_keys
from .signing.notification import verify_notification
from .signing.signer import RSASigner, SignerRegistry, SignType
from .utils.time import Clock, now

_logger = logging.getLogger(__name__)


class AlipayClient:
    """
    Client for the Alipay open-platform gateway.
    
    Create once and reuse for every call. Signers are owned by the instance,
    so several clients with different keys can live side by side.
    """
    
    def __init__(
        self,
        app_id: str,
        key_pair: Optional[KeyPair] = None,
        *,
        registry: Optional[SignerRegistry] = None,
        partner_id: str = "",
        production: bool = False,
        sign_type: Union[SignType, str] = SignType.RSA2,
        gateway_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize client.
        
        Args:
            app_id: Application identifier
            key_pair: Key material registered for both RSA and RSA2
            registry: Explicit signer registry, instead of key_pair
            partner_id: Partner (PID) identifier
            production: Use the production gateway instead of the sandbox
            sign_type: Active signature algorithm
            gateway_url: Explicit endpoint, overrides production
            session: requests session to send through
            timeout: Transport timeout in seconds
            clock: Callable returning the current datetime for timestamps
            
        Raises:
            ConfigError: If app_id or key material is missing
        """
        if not app_id:
            raise ConfigError("app_id is required")
        if registry is None:
            if key_pair is None:
                raise ConfigError("KeyPair is required")
            registry = SignerRegistry.for_key_pair(key_pair)
        
        self.app_id = app_id
        self.partner_id = partner_id
        self.registry = registry
        if gateway_url:
            self.gateway_url = gateway_url
        else:
            self.gateway_url = PRODUCTION_API_URL if production else SANDBOX_API_URL
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self._clock = clock
        self._signer = self.registry.get(sign_type)
    
    @property
    def signer(self) -> RSASigner:
        """Active signer."""
        return self._signer
    
    @property
    def sign_type(self) -> SignType:
        return self._signer.sign_type
    
    def use_sign_type(self, sign_type: Union[SignType, str]):
        """
        Switch the active signature algorithm.
        
        Raises:
            ConfigError: If sign_type is unsupported or not registered
        """
        self._signer = self.registry.get(sign_type)
    
    # ==================== Request Building ====================
    
    def _signer_for(self, sign_type: Optional[Union[SignType, str]]) -> RSASigner:
        if sign_type is None:
            return self._signer
        return self.registry.get(sign_type)
    
    def build_params(
        self,
        call: APICall,
        sign_type: Optional[Union[SignType, str]] = None,
    ) -> Dict[str, str]:
        """
        Assemble and sign the parameters of a call.
        
        Args:
            call: API call description
            sign_type: Signature algorithm for this call only; defaults to the active one
            
        Returns:
            Ordered parameters with ``sign`` last
            
        Raises:
            InvalidCallError: If the call is missing or repeats a field
            CryptoError: If signing fails
            ConfigError: If sign_type is unsupported or not registered
        """
        if call is None:
            raise InvalidCallError("APICall is None")
        signer = self._signer_for(sign_type)
        
        params = {
            'app_id': self.app_id,
            'method': call.api_name(),
            'format': FORMAT,
            'charset': CHARSET,
            'sign_type': signer.sign_type.value,
            'timestamp': now(self._clock),
            'version': VERSION,
        }
        
        ext_name = call.ext_param_name()
        if ext_name:
            self._add_param(params, ext_name, call.ext_param_value())
        for key, value in (call.params() or {}).items():
            self._add_param(params, key, value)
        
        keys = sorted_keys(params)
        _logger.debug("Signing %s over %s", call.api_name(), keys)
        params[SIGN_FIELD] = signer.sign(keys, params)
        return params
    
    @staticmethod
    def _add_param(params: Dict[str, str], key: str, value: Any):
        if key in params or key == SIGN_FIELD:
            raise InvalidCallError(f"Duplicate request field: {key}")
        params[key] = "" if value is None else str(value)
    
    def sign_order_string(
        self,
        call: APICall,
        sign_type: Optional[Union[SignType, str]] = None,
    ) -> str:
        """
        Signed, URL-encoded parameter string for client-side (app) payments.
        """
        return urlencode(self.build_params(call, sign_type))
    
    def build_page_url(
        self,
        call: APICall,
        sign_type: Optional[Union[SignType, str]] = None,
    ) -> str:
        """
        Gateway URL carrying the signed parameters, for redirect payments.
        """
        return f"{self.gateway_url}?{self.sign_order_string(call, sign_type)}"
    
    # ==================== Dispatch ====================
    
    def _send(self, method: str, params: Mapping[str, str]) -> requests.Response:
        _logger.info("Sending %s %s to %s", method, params.get('method'), self.gateway_url)
        try:
            response = self.session.request(
                method,
                self.gateway_url,
                data=urlencode(params).encode('ascii'),
                headers={'Content-Type': CONTENT_TYPE},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            _logger.error("Gateway request timed out after %s seconds", self.timeout)
            raise TransportError(f"Gateway request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            _logger.error("Gateway request failed: %s", e)
            raise TransportError(f"Gateway request failed: {e}") from e
        
        _logger.info("Gateway response status: %s", response.status_code)
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Gateway response body: %d bytes", len(response.content))
        return response
    
    def execute(
        self,
        method: str,
        call: APICall,
        result_type: Optional[ResultType] = None,
        sign_type: Optional[Union[SignType, str]] = None,
    ) -> Any:
        """
        Perform a gateway call.
        
        This is the core call sequence. It:
        1. Builds and signs the parameters
        2. Sends them form-encoded to the gateway
        3. Verifies the payload node signature, if a public key is loaded
        4. Decodes the full body into result_type
        
        Args:
            method: HTTP verb, usually ``POST``
            call: API call description
            result_type: Decode target, see decode_response()
            sign_type: Signature algorithm for this call only; the response
                is verified with the same one
            
        Returns:
            Decoded result
            
        Raises:
            InvalidCallError: If the call is malformed
            TransportError: If the HTTP exchange fails
            EncodingError: If the response sign is not valid base64
            SignatureInvalidError: If the response signature does not match
            DecodeError: If the body cannot be decoded
            ConfigError: If sign_type is unsupported or not registered
        """
        signer = self._signer_for(sign_type)
        params = self.build_params(call, signer.sign_type)
        response = self._send(method.upper(), params)
        body = response.content
        
        if signer.can_verify():
            verify_response(signer, call.api_name(), body, response.status_code)
        else:
            _logger.debug("No public key loaded; response signature not checked")
        
        return decode_response(body, result_type)
    
    # ==================== Notifications ====================
    
    def verify_notification(self, form: Mapping[str, Any]) -> bool:
        """
        Verify an asynchronous notification's posted form fields.
        
        Raises:
            EncodingError: If ``sign`` is not valid base64
            SignatureInvalidError: If the signature does not match
        """
        return verify_notification(self.registry, form)
    
    def close(self):
        """Close the HTTP session."""
        self.session.close()
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

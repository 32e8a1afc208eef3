"""
Configuration constants for alipay_gateway.
These are immutable protocol constants, not runtime configuration.
"""

# Gateway endpoints
PRODUCTION_API_URL = "https://openapi.alipay.com/gateway.do"
SANDBOX_API_URL = "https://openapi.alipaydev.com/gateway.do"

# Fixed request fields
FORMAT = "JSON"
CHARSET = "utf-8"
VERSION = "1.0"
CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"

# Sign types
SIGN_TYPE_RSA = "RSA"
SIGN_TYPE_RSA2 = "RSA2"

# Field names
SIGN_FIELD = "sign"
SIGN_TYPE_FIELD = "sign_type"
DEFAULT_EXT_PARAM_NAME = "biz_content"

# Response payload node is <method with '.' replaced by '_'> + suffix
RESPONSE_SUFFIX = "_response"
SUCCESS_CODE = "10000"

# Time constants
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# RSA constants
PKCS1V15_PADDING_OVERHEAD = 11  # Bytes reserved by PKCS#1 v1.5 encryption padding
DEFAULT_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

# Compact JSON settings for biz_content
JSON_SEPARATORS = (',', ':')
JSON_ENSURE_ASCII = False

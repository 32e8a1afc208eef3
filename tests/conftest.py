"""
Shared fixtures: RSA key material and a fake HTTP session.
"""

import base64

import pytest

from alipay_gateway import KeyPair


@pytest.fixture(scope="session")
def key_pair():
    """2048-bit keypair whose public half verifies its own signatures."""
    return KeyPair.generate(2048)


@pytest.fixture(scope="session")
def other_key_pair():
    """Unrelated keypair for mismatch checks."""
    return KeyPair.generate(2048)


@pytest.fixture(scope="session")
def signing_only_key_pair(key_pair):
    """Same private key, no public key loaded."""
    return KeyPair(key_pair.private_key)


def sign_text(key_pair, text, hash_name="sha256"):
    """Base64 PKCS#1 v1.5 signature over text, as the gateway produces it."""
    signature = key_pair.sign_pkcs1v15(text.encode('utf-8'), hash_name)
    return base64.b64encode(signature).decode('ascii')


def make_response_body(key_pair, node_name, payload_text, hash_name="sha256"):
    """Gateway response body signing payload_text under node_name."""
    sign = sign_text(key_pair, payload_text, hash_name)
    return f'{{"{node_name}":{payload_text},"sign":"{sign}"}}'.encode('utf-8')


class FakeResponse:
    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code
    
    @property
    def text(self):
        return self.content.decode('utf-8', errors='replace')


class FakeSession:
    """Records requests and replays a canned response."""
    
    def __init__(self, content=b"{}", status_code=200, error=None):
        self.content = content
        self.status_code = status_code
        self.error = error
        self.requests = []
        self.closed = False
    
    def request(self, method, url, data=None, headers=None, timeout=None):
        self.requests.append({
            'method': method,
            'url': url,
            'data': data,
            'headers': headers,
            'timeout': timeout,
        })
        if self.error is not None:
            raise self.error
        return FakeResponse(self.content, self.status_code)
    
    def close(self):
        self.closed = True

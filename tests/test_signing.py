"""
Tests for canonical string construction, signing and verification.
"""

import base64

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from alipay_gateway import RSASigner, SignerRegistry, SignType
from alipay_gateway.errors import (
    ConfigError,
    CryptoError,
    EncodingError,
    SignatureInvalidError,
    UnsignedRequestWarning,
)
from alipay_gateway.signing.canonical import (
    build_canonical_string,
    build_notification_string,
    sorted_keys,
)


PARAMS = {
    'method': 'alipay.trade.query',
    'app_id': '2021000000000000',
    'charset': 'utf-8',
    'biz_content': '{"out_trade_no":"123"}',
    'version': '1.0',
}


class TestCanonicalString:
    """Test the canonical key=value string."""
    
    def test_sorted_join(self):
        """Test that fragments follow the given key order."""
        keys = sorted_keys(PARAMS)
        
        assert keys == ['app_id', 'biz_content', 'charset', 'method', 'version']
        assert build_canonical_string(keys, PARAMS) == (
            'app_id=2021000000000000&biz_content={"out_trade_no":"123"}'
            '&charset=utf-8&method=alipay.trade.query&version=1.0'
        )
    
    def test_values_trimmed_and_empty_skipped(self):
        """Test that values are trimmed and empty ones dropped."""
        params = {'a': '  1 ', 'b': '   ', 'c': '', 'd': 'x y'}
        
        assert build_canonical_string(sorted_keys(params), params) == 'a=1&d=x y'
    
    def test_byte_order_sort(self):
        """Test that uppercase sorts before lowercase, as raw bytes do."""
        assert sorted_keys({'b': '1', 'B': '2', 'a': '3', '_': '4'}) == ['B', '_', 'a', 'b']
    
    def test_missing_key_skipped(self):
        assert build_canonical_string(['a', 'zzz'], {'a': '1'}) == 'a=1'
    
    def test_multi_valued_uses_first(self):
        form = {'a': ['1', '2'], 'b': []}
        assert build_canonical_string(['a', 'b'], form) == 'a=1'
    
    def test_empty_inputs(self):
        assert build_canonical_string([], PARAMS) == ''
        assert build_canonical_string(None, PARAMS) == ''
        assert build_canonical_string(['a'], {}) == ''
    
    def test_notification_excludes_sign_fields(self):
        """Test that sign and sign_type never enter the notification string."""
        form = {
            'trade_no': '2024',
            'sign': 'abc',
            'sign_type': 'RSA2',
            'total_amount': '9.99',
            'buyer_logon_id': '',
        }
        
        assert build_notification_string(form) == 'total_amount=9.99&trade_no=2024'


class TestSigner:
    """Test RSA and RSA2 signing and verification."""
    
    @pytest.mark.parametrize("sign_type", [SignType.RSA, SignType.RSA2])
    def test_sign_and_verify(self, key_pair, sign_type):
        """Test that a signature verifies against the canonical string."""
        signer = RSASigner(sign_type, key_pair)
        keys = sorted_keys(PARAMS)
        
        sign = signer.sign(keys, PARAMS)
        canonical = build_canonical_string(keys, PARAMS).encode('utf-8')
        
        signer.verify_response_data(canonical, sign)
    
    def test_hash_per_sign_type(self, key_pair):
        """Test that RSA uses SHA-1 and RSA2 uses SHA-256."""
        keys = sorted_keys(PARAMS)
        canonical = build_canonical_string(keys, PARAMS).encode('utf-8')
        
        for sign_type, algorithm in ((SignType.RSA, hashes.SHA1()), (SignType.RSA2, hashes.SHA256())):
            sign = RSASigner(sign_type, key_pair).sign(keys, PARAMS)
            key_pair.public_key.verify(
                base64.b64decode(sign),
                canonical,
                padding.PKCS1v15(),
                algorithm,
            )
    
    def test_signature_deterministic(self, key_pair):
        """Test that signing the same inputs twice gives the same signature."""
        signer = RSASigner(SignType.RSA2, key_pair)
        keys = sorted_keys(PARAMS)
        
        assert signer.sign(keys, PARAMS) == signer.sign(keys, PARAMS)
    
    def test_parameter_order_independent(self, key_pair):
        """Test that mapping insertion order does not affect the signature."""
        signer = RSASigner(SignType.RSA2, key_pair)
        reordered = dict(reversed(list(PARAMS.items())))
        
        assert signer.sign(sorted_keys(reordered), reordered) == signer.sign(sorted_keys(PARAMS), PARAMS)
    
    def test_mismatched_key_rejected(self, key_pair, other_key_pair):
        """Test that another key's public half rejects the signature."""
        keys = sorted_keys(PARAMS)
        sign = RSASigner(SignType.RSA2, key_pair).sign(keys, PARAMS)
        canonical = build_canonical_string(keys, PARAMS).encode('utf-8')
        
        with pytest.raises(SignatureInvalidError):
            RSASigner(SignType.RSA2, other_key_pair).verify_response_data(canonical, sign)
    
    def test_wrong_hash_rejected(self, key_pair):
        """Test that an RSA signature does not verify as RSA2."""
        keys = sorted_keys(PARAMS)
        sign = RSASigner(SignType.RSA, key_pair).sign(keys, PARAMS)
        canonical = build_canonical_string(keys, PARAMS).encode('utf-8')
        
        with pytest.raises(SignatureInvalidError):
            RSASigner(SignType.RSA2, key_pair).verify_response_data(canonical, sign)
    
    def test_tampered_data_rejected(self, key_pair):
        signer = RSASigner(SignType.RSA2, key_pair)
        sign = signer.sign(['a'], {'a': '1'})
        
        with pytest.raises(SignatureInvalidError):
            signer.verify_response_data(b'a=2', sign)
    
    def test_malformed_base64(self, key_pair):
        signer = RSASigner(SignType.RSA2, key_pair)
        
        with pytest.raises(EncodingError):
            signer.verify_response_data(b'a=1', 'not*base64!')
    
    def test_no_public_key(self, signing_only_key_pair):
        """Test that a signer without public key reports it cannot verify."""
        signer = RSASigner(SignType.RSA2, signing_only_key_pair)
        sign = signer.sign(['a'], {'a': '1'})
        
        assert sign
        assert not signer.can_verify()
        with pytest.raises(CryptoError):
            signer.verify_response_data(b'a=1', sign)
    
    def test_nothing_to_sign_warns(self, key_pair):
        """Test that empty keys or params give an empty signature with a warning."""
        signer = RSASigner(SignType.RSA2, key_pair)
        
        with pytest.warns(UnsignedRequestWarning):
            assert signer.sign([], PARAMS) == ''
        with pytest.warns(UnsignedRequestWarning):
            assert signer.sign(['a'], None) == ''
    
    def test_missing_key_pair(self):
        with pytest.raises(ConfigError):
            RSASigner(SignType.RSA2, None)


class TestSignerRegistry:
    """Test per-client signer registries."""
    
    def test_for_key_pair_registers_both(self, key_pair):
        registry = SignerRegistry.for_key_pair(key_pair)
        
        assert registry.sign_types == {SignType.RSA, SignType.RSA2}
        assert registry.get(SignType.RSA).sign_type is SignType.RSA
        assert registry.get("RSA2").sign_type is SignType.RSA2
    
    def test_independent_key_pairs(self, key_pair, other_key_pair):
        """Test that two registries do not share key material."""
        first = SignerRegistry.for_key_pair(key_pair)
        second = SignerRegistry.for_key_pair(other_key_pair)
        
        assert first.get(SignType.RSA2).key_pair is key_pair
        assert second.get(SignType.RSA2).key_pair is other_key_pair
    
    def test_unregistered_type(self, key_pair):
        registry = SignerRegistry({SignType.RSA2: key_pair})
        
        assert SignType.RSA not in registry
        with pytest.raises(ConfigError):
            registry.get(SignType.RSA)
        with pytest.raises(ConfigError):
            registry.get("MD5")
    
    def test_empty_registry(self):
        with pytest.raises(ConfigError):
            SignerRegistry({})
    
    @pytest.mark.parametrize("sign_type", ["MD5", "rsa2"])
    def test_unsupported_sign_type_in_mapping(self, key_pair, sign_type):
        """Test that an unsupported sign type is a configuration error."""
        with pytest.raises(ConfigError):
            SignerRegistry({sign_type: key_pair})
        with pytest.raises(ConfigError):
            SignerRegistry.for_key_pair(key_pair, sign_types=(sign_type,))
    
    def test_unsupported_sign_type_for_signer(self, key_pair):
        with pytest.raises(ConfigError):
            RSASigner("MD5", key_pair)

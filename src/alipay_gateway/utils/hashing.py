"""
Hash algorithm selection for RSA PKCS#1 v1.5 signatures.
"""

from cryptography.hazmat.primitives import hashes


_HASH_ALGORITHMS = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
}


def get_hash_algorithm(name: str) -> hashes.HashAlgorithm:
    """
    Get a hash algorithm instance by name.
    
    Args:
        name: Hash name, ``sha1`` or ``sha256``
        
    Returns:
        cryptography HashAlgorithm instance
        
    Raises:
        ValueError: If the hash is not supported
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected str, got {type(name)}")
    
    try:
        return _HASH_ALGORITHMS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {name}")

"""Interface of the external encryption collaborator.

recap never encrypts anything itself. A caller that wants encrypted
content plugs in an object with this shape (an OpenPGP wrapper, a KMS
client, ...) and the service layer passes content through it.
"""
from typing import Protocol, runtime_checkable


@runtime_checkable
class Encryptor(Protocol):
    """String-to-string encryption keyed by a key ID.

    Both methods may raise recap.exceptions.EncryptionError.
    """

    def encrypt(self, plaintext: str, key_id: str) -> str:
        """Encrypt plaintext for the key with the given ID."""
        ...

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt ciphertext produced by encrypt()."""
        ...

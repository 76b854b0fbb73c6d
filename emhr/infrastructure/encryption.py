import base64
from typing import Optional
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from emhr.core.config import settings
from emhr.core.exceptions import EncryptionError


class EncryptionManager:
    """Encrypts sensitive client fields (SSN) at rest"""

    def __init__(self, secret: Optional[str] = None):
        self._cipher = self._build_cipher(secret or settings.ENCRYPTION_KEY)

    @staticmethod
    def _build_cipher(secret: str) -> Fernet:
        # Derive a Fernet key from the configured secret
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=b'emhr_field_encryption',
            iterations=100000,
        )
        key = base64.urlsafe_b64encode(kdf.derive(secret.encode()))
        return Fernet(key)

    def encrypt_data(self, data: Optional[str]) -> Optional[str]:
        """Encrypt a string value"""
        if not data:
            return data
        return self._cipher.encrypt(str(data).encode('utf-8')).decode('utf-8')

    def decrypt_data(self, encrypted_data: Optional[str]) -> Optional[str]:
        """Decrypt a string value"""
        if not encrypted_data:
            return encrypted_data
        try:
            return self._cipher.decrypt(encrypted_data.encode('utf-8')).decode('utf-8')
        except InvalidToken as e:
            raise EncryptionError("Unable to decrypt stored value") from e


_manager: Optional[EncryptionManager] = None


def get_encryption_manager() -> EncryptionManager:
    global _manager
    if _manager is None:
        _manager = EncryptionManager()
    return _manager


def encrypt_data(data: Optional[str]) -> Optional[str]:
    return get_encryption_manager().encrypt_data(data)


def decrypt_data(encrypted_data: Optional[str]) -> Optional[str]:
    return get_encryption_manager().decrypt_data(encrypted_data)


def mask_ssn(ssn: Optional[str]) -> Optional[str]:
    """Show only the last four digits"""
    if not ssn:
        return ssn
    digits = "".join(ch for ch in ssn if ch.isdigit())
    return f"***-**-{digits[-4:]}" if len(digits) >= 4 else "***"

from .credential_validator import CredentialValidationResult, ExchangeCredentialValidator, sign_query
from .crypto import CredentialCipher

__all__ = [
    "CredentialValidationResult",
    "ExchangeCredentialValidator",
    "CredentialCipher",
    "sign_query",
]

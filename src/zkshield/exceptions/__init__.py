"""Custom exceptions for the zkshield cryptographic core."""


class ZKShieldException(Exception):
    """Base exception for all zkshield errors."""
    pass


# Cryptography Errors
class CryptoError(ZKShieldException):
    """Base exception for cryptographic errors."""
    pass


class InvalidFieldElementError(CryptoError):
    """Raised when a value is not a canonical field element or scalar."""
    pass


class InvalidPointError(CryptoError):
    """Raised when a point is off-curve, outside the subgroup, or malformed."""
    pass


class NotInitializedError(CryptoError):
    """Raised when the hash permutation is used before setup completed."""
    pass


class AuthenticationFailedError(CryptoError):
    """Raised when a ciphertext tag does not match (wrong key or corrupted data)."""
    pass


class EncryptionError(CryptoError):
    """Raised when encryption fails."""
    pass


class DecryptionError(CryptoError):
    """Raised when decryption fails."""
    pass


# Threshold Errors
class ThresholdError(ZKShieldException):
    """Base exception for threshold decryption errors."""
    pass


class InsufficientSharesError(ThresholdError):
    """Raised when fewer shares than the threshold are combined."""
    pass


class DuplicateIndexError(ThresholdError):
    """Raised when the same committee index appears twice."""
    pass


class InvalidShareIndexError(ThresholdError):
    """Raised when a committee index is zero or not reducible to a valid x-coordinate."""
    pass


# Encoding Errors
class EncodingError(ZKShieldException):
    """Base exception for wire-format errors."""
    pass


class DeserializationError(EncodingError):
    """Raised when deserialization fails."""
    pass

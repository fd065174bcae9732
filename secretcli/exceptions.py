"""
Exceptions for the secretcli package.
"""
from typing import Optional


class SecretCLIError(Exception):
    """Base exception for secretcli errors."""
    pass


class DaemonError(SecretCLIError):
    """Raised when the daemon process cannot be run."""
    pass


class DaemonNotFoundError(DaemonError):
    """Raised when the daemon binary is missing or cannot be executed."""

    def __init__(self, message: str, binary: Optional[str] = None):
        self.binary = binary
        super().__init__(message)


class DeserializationError(SecretCLIError):
    """
    Raised when daemon output is not valid JSON or does not match the
    expected response schema.
    """

    def __init__(self, message: str, raw_output: Optional[str] = None):
        self.raw_output = raw_output
        super().__init__(message)


class MessageSerializationError(SecretCLIError):
    """Raised when a contract message cannot be serialized to JSON."""
    pass


class NoCachedContractError(SecretCLIError):
    """Raised when no cached contract is available for a lookup."""

    def __init__(self, message: str = "no cached contract found", name: Optional[str] = None):
        self.name = name
        super().__init__(message)


class ContractNotCachedError(NoCachedContractError):
    """Raised when a named cache entry is missing, unreadable or invalid."""
    pass

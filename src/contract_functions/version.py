"""Library version."""

CONTRACTS_VERSION = "1.0.0"

__all__ = ["CONTRACTS_VERSION"]

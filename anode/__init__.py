"""aNode paymaster: ERC-4337 UserOperation hashing, signing and sponsorship."""

__version__ = "0.1.0"

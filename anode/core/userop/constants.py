"""
EntryPoint deployment constants.
"""

from .models import EntryPointVersion

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

SEPOLIA_CHAIN_ID = 11155111

ENTRYPOINT_ADDRESSES = {
    EntryPointVersion.V06: "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789",
    EntryPointVersion.V07: "0x0000000071727De22E5E9d8BAf0edAc6f37da032",
}


def default_entry_point(version) -> str:
    """Canonical EntryPoint address for a version tag."""
    return ENTRYPOINT_ADDRESSES[EntryPointVersion.parse(version)]

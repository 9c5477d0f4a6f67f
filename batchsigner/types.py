"""Type definitions for batchsigner.

This module contains NewType definitions for the hex strings that leave the
library, so call sites say which kind of hex they hold.
"""

from typing import NewType

DigestHex = NewType("DigestHex", str)
"""0x-prefixed hex of a 32-byte keccak256 digest (66 characters)."""

SignatureHex = NewType("SignatureHex", str)
"""0x-prefixed hex of R || S || recovery_id (132 characters)."""

AddressHex = NewType("AddressHex", str)
"""0x-prefixed lower-case hex of a 20-byte signer address."""

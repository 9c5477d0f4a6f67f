"""Tests for signature serialization."""

import pytest

from batchsigner.encoding import decode_signature, encode_signature, to_prefixed_hex
from batchsigner.errors import InvalidSignatureError
from batchsigner.models import RecoverableSignature

from .conftest import REFERENCE_SIGNATURE

R = bytes(range(32))
S = bytes(range(32, 64))


class TestEncodeSignature:
    """Tests for encode_signature."""

    def test_layout(self) -> None:
        """R comes first, then S, then the recovery id byte."""
        encoded = encode_signature(R, S, 1)
        assert encoded == "0x" + R.hex() + S.hex() + "01"
        assert len(encoded) == 132

    def test_lower_case(self) -> None:
        encoded = encode_signature(b"\xff" * 32, b"\xab" * 32, 0)
        assert encoded == encoded.lower()

    @pytest.mark.parametrize("recovery_id", [0, 1, 2, 3])
    def test_recovery_ids(self, recovery_id: int) -> None:
        assert encode_signature(R, S, recovery_id).endswith(f"0{recovery_id}")

    @pytest.mark.parametrize(
        ("r", "s", "recovery_id", "expected_error"),
        [
            (R[:31], S, 0, "R must be 32 bytes"),
            (R, S + b"\x00", 0, "S must be 32 bytes"),
            (R, S, 4, "recovery_id must be between"),
            (R, S, -1, "recovery_id must be between"),
        ],
        ids=["short_r", "long_s", "recovery_id_too_high", "negative_recovery_id"],
    )
    def test_invalid_components(
        self, r: bytes, s: bytes, recovery_id: int, expected_error: str
    ) -> None:
        with pytest.raises(ValueError, match=expected_error):
            encode_signature(r, s, recovery_id)

    def test_model_to_hex(self) -> None:
        signature = RecoverableSignature(r=R, s=S, recovery_id=1)
        assert signature.to_hex() == encode_signature(R, S, 1)
        assert signature.to_bytes() == R + S + b"\x01"


class TestDecodeSignature:
    """Tests for decode_signature."""

    def test_reference_signature(self) -> None:
        signature = decode_signature(REFERENCE_SIGNATURE)
        assert signature.r.hex() == REFERENCE_SIGNATURE[2:66]
        assert signature.s.hex() == REFERENCE_SIGNATURE[66:130]
        assert signature.recovery_id == 1
        assert signature.to_hex() == REFERENCE_SIGNATURE

    def test_accepts_missing_prefix(self) -> None:
        assert decode_signature(REFERENCE_SIGNATURE[2:]) == decode_signature(REFERENCE_SIGNATURE)

    @pytest.mark.parametrize(
        ("signature_hex", "expected_error"),
        [
            (REFERENCE_SIGNATURE[:-2], "must be 65 bytes"),
            ("0x" + "zz" * 65, "not valid hex"),
            ("0x" + "00" * 64 + "04", "recovery_id must be between"),
            ("0x" + "00" * 63 + "  " + "00", "whitespace"),
        ],
        ids=["too_short", "non_hex", "bad_recovery_id", "whitespace"],
    )
    def test_invalid(self, signature_hex: str, expected_error: str) -> None:
        with pytest.raises(InvalidSignatureError, match=expected_error):
            decode_signature(signature_hex)


def test_to_prefixed_hex() -> None:
    assert to_prefixed_hex(b"\x00\xff") == "0x00ff"
    assert to_prefixed_hex(b"") == "0x"

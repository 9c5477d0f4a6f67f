"""Tests for private key loading and key material handling."""

from pathlib import Path

import pytest

from batchsigner.config import Config
from batchsigner.errors import InvalidPrivateKeyError
from batchsigner.keys import (
    PRIVATE_KEY_ENV_VAR,
    SECP256K1_ORDER,
    load_private_key,
    load_private_key_file,
    parse_private_key,
    validate_private_key,
)

from .conftest import REFERENCE_PRIVATE_KEY


class TestValidatePrivateKey:
    """Tests for validate_private_key."""

    def test_valid_key(self) -> None:
        key = validate_private_key(bytes.fromhex(REFERENCE_PRIVATE_KEY))
        assert key.secret == bytes.fromhex(REFERENCE_PRIVATE_KEY)

    @pytest.mark.parametrize(
        ("secret", "expected_error"),
        [
            (b"\x01" * 31, "must be 32 bytes"),
            (b"\x01" * 33, "must be 32 bytes"),
            (b"\x00" * 32, "must not be zero"),
            (SECP256K1_ORDER.to_bytes(32, "big"), "less than the secp256k1 order"),
            ((SECP256K1_ORDER + 1).to_bytes(32, "big"), "less than the secp256k1 order"),
        ],
        ids=["short", "long", "zero", "order", "above_order"],
    )
    def test_invalid(self, secret: bytes, expected_error: str) -> None:
        with pytest.raises(InvalidPrivateKeyError, match=expected_error):
            validate_private_key(secret)

    def test_copies_input(self) -> None:
        source = bytearray.fromhex(REFERENCE_PRIVATE_KEY)
        key = validate_private_key(source)
        source[0] = 0
        assert key.secret == bytes.fromhex(REFERENCE_PRIVATE_KEY)


class TestParsePrivateKey:
    """Tests for parse_private_key."""

    @pytest.mark.parametrize(
        "text",
        [
            REFERENCE_PRIVATE_KEY,
            f"0x{REFERENCE_PRIVATE_KEY}",
            f"0X{REFERENCE_PRIVATE_KEY.upper()}",
            f"  {REFERENCE_PRIVATE_KEY}\n",
        ],
        ids=["plain", "prefixed", "upper", "whitespace"],
    )
    def test_valid(self, text: str) -> None:
        assert parse_private_key(text).secret == bytes.fromhex(REFERENCE_PRIVATE_KEY)

    @pytest.mark.parametrize(
        ("text", "expected_error"),
        [
            ("", "64 hex characters"),
            (REFERENCE_PRIVATE_KEY + "00", "64 hex characters"),
            ("g" * 64, "not valid hex"),
            ("00" * 32, "must not be zero"),
        ],
        ids=["empty", "too_long", "non_hex", "zero"],
    )
    def test_invalid(self, text: str, expected_error: str) -> None:
        with pytest.raises(InvalidPrivateKeyError, match=expected_error):
            parse_private_key(text)

    def test_error_does_not_leak_key(self) -> None:
        bad_key = REFERENCE_PRIVATE_KEY[:-1] + "x"
        with pytest.raises(InvalidPrivateKeyError) as exc_info:
            parse_private_key(bad_key)
        assert REFERENCE_PRIVATE_KEY[:16] not in str(exc_info.value)

    @pytest.mark.parametrize(
        "value",
        [None, 1, bytes.fromhex(REFERENCE_PRIVATE_KEY)],
        ids=["none", "int", "bytes"],
    )
    def test_non_string(self, value: object) -> None:
        with pytest.raises(InvalidPrivateKeyError, match="must be a string"):
            parse_private_key(value)  # type: ignore[arg-type]


class TestPrivateKeyMaterial:
    """Tests for zeroizing key material."""

    def test_clear(self) -> None:
        key = parse_private_key(REFERENCE_PRIVATE_KEY)
        assert not key.is_cleared
        key.clear()
        assert key.is_cleared
        with pytest.raises(ValueError, match="cleared"):
            _ = key.secret

    def test_repr_hides_secret(self) -> None:
        key = parse_private_key(REFERENCE_PRIVATE_KEY)
        assert REFERENCE_PRIVATE_KEY[:16] not in repr(key)


class TestLoadPrivateKey:
    """Tests for resolving the key from configuration."""

    def test_from_file(self, private_key_file: Path) -> None:
        key = load_private_key_file(private_key_file)
        assert key.secret == bytes.fromhex(REFERENCE_PRIVATE_KEY)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidPrivateKeyError, match="not found"):
            load_private_key_file(tmp_path / "missing.key")

    def test_config_file_wins_over_env(self, private_key_file: Path) -> None:
        config = Config(private_key_file=private_key_file)
        other = "01" * 32
        key = load_private_key(config, environ={PRIVATE_KEY_ENV_VAR: other})
        assert key.secret == bytes.fromhex(REFERENCE_PRIVATE_KEY)

    def test_from_env(self) -> None:
        key = load_private_key(Config(), environ={PRIVATE_KEY_ENV_VAR: REFERENCE_PRIVATE_KEY})
        assert key.secret == bytes.fromhex(REFERENCE_PRIVATE_KEY)

    def test_nothing_configured(self) -> None:
        with pytest.raises(InvalidPrivateKeyError, match="No private key configured"):
            load_private_key(Config(), environ={})

    def test_invalid_key_in_file(self, tmp_path: Path) -> None:
        key_file = tmp_path / "bad.key"
        key_file.write_text("00" * 32)
        with pytest.raises(InvalidPrivateKeyError, match="must not be zero"):
            load_private_key(Config(private_key_file=key_file), environ={})

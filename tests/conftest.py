"""Test fixtures and utilities."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from litestar.testing import AsyncTestClient

from batchsigner.config import Config
from batchsigner.keys import parse_private_key
from batchsigner.models import PrivateKeyMaterial
from batchsigner.server import create_app
from batchsigner.signer import BatchSigner

REFERENCE_PRIVATE_KEY = "48acf19375e8a27309fe5394728abc2eb6d5a0a4feb6b6c53207ca1c256a6739"

REFERENCE_TX_HASHES = [
    "0xf8ad82e69c85012a05f200830329189455d398326f99059ff775485246999027b319795580b844a9059cbb"
    "0000000000000000000000006df68f71f19081751850160118fc755bfeb03612000000000000000000000000"
    "0000000000000000000000056bc75e2d631000008193a0ade014e655a2d1645efb5f37a142c2369ab96d2d96"
    "2861dd353fa33fe15b76cda041b291fb742d07c0d475cb2611e9dd6010bbd052c79f99e73c7f9e3653afb6f7",
    "0xf8ec8307f58584b8c6fe72830927c094bddbcbaa9cf9603b7055aad963506ede71692f1280b88300000003"
    "00000000000000000000000000000000000000000000000087250559b9145f90000000000000000000000000"
    "00000000000000000000011f35cc4934f0b52a80bb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c55d39832"
    "6f99059ff775485246999027b319795500006400000000000000000af935e000000000000000008193a0f63b"
    "ed83d054bdecfb6852f980ed62f35922fe5b68296b603b290a3eff41fabea04b73872c7e68f541bc97eba52a"
    "bf956eac4a0e198b762e1f9a872336f6748eed",
]

REFERENCE_SIGNATURE = (
    "0x83e4b3a6af20e58315554b5bc38a8398cfca44a75d42973a4454378b0dc9cae6"
    "3c229b52341d1ddfc4e3ad4360e518c1f1363e2d21fcba507e8e2e10e266edd201"
)

TX_HASH_A = "0x" + "11" * 32
TX_HASH_B = "0x" + "22" * 32
TX_HASH_C = "0x" + "33" * 32


@pytest.fixture
def private_key() -> PrivateKeyMaterial:
    """Return the reference private key as key material."""
    return parse_private_key(REFERENCE_PRIVATE_KEY)


@pytest.fixture
def private_key_file(tmp_path: Path) -> Path:
    """Write the reference private key to a file, with prefix and trailing newline."""
    key_file = tmp_path / "signer.key"
    key_file.write_text(f"0x{REFERENCE_PRIVATE_KEY}\n")
    return key_file


@pytest.fixture
def config(private_key_file: Path) -> Config:
    """Create a test configuration."""
    return Config(
        host="127.0.0.1",
        port=8080,
        log_level="DEBUG",
        private_key_file=private_key_file,
    )


@pytest.fixture
def signer(private_key: PrivateKeyMaterial) -> Generator[BatchSigner, None, None]:
    """Create a signer holding the reference key."""
    signer = BatchSigner(private_key)
    yield signer
    signer.close()


@pytest.fixture
async def client(config: Config) -> AsyncGenerator[AsyncTestClient, None]:
    """Create a test client."""
    app = create_app(config)
    async with AsyncTestClient(app) as client:
        yield client


@pytest.fixture
async def strict_client(private_key_file: Path) -> AsyncGenerator[AsyncTestClient, None]:
    """Create a test client that only accepts 32-byte transaction hashes."""
    config = Config(private_key_file=private_key_file, strict_hashes=True)
    app = create_app(config)
    async with AsyncTestClient(app) as client:
        yield client

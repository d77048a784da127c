"""Test the blob simulator configuration."""

from ..blobs import BlobSuiteConfig


def test_defaults():
    """Test the defaults shared with the hive client images."""
    config = BlobSuiteConfig()
    assert config.GAS_FEE_CAP == 30 * 10**9
    assert config.GAS_TIP_CAP == 10**9
    assert len(config.JWT_SECRET) == 32
    assert (config.ETH_PORT, config.ENGINE_PORT) == (8545, 8551)


def test_override():
    """Test that a scenario may override a default."""
    config = BlobSuiteConfig(GAS_TIP_CAP=2 * 10**9)
    assert config.GAS_TIP_CAP == 2 * 10**9
    assert config.GAS_FEE_CAP == BlobSuiteConfig().GAS_FEE_CAP


def test_destination_addresses():
    """Test the range of destination addresses of the blob transactions."""
    config = BlobSuiteConfig()
    assert config.DATAHASH_START_ADDRESS == 0x100
    assert config.DATAHASH_ADDRESS_COUNT == 1000

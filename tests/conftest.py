import pytest

from courier_recon.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    # Ignore any local .env file
    return Settings(_env_file=None)

"""Root pytest configuration for fileblob tests."""
import pytest

from fileblob.location import DefaultLocationStrategy, LocationRegistry
from fileblob.settings import Settings


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (may take significant time)"
    )


@pytest.fixture(autouse=True)
def test_env(monkeypatch, tmp_path):
    """Keep every test away from the real user data directory."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    for key in (
        "FILEBLOB_DATA_DIR",
        "FILEBLOB_LOCATION",
        "FILEBLOB_CHUNK_SIZE",
        "FILEBLOB_ATOMIC_WRITES",
        "FILEBLOB_VERIFY_DIGEST",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def data_dir(tmp_path):
    """Default root for the empty location key."""
    return tmp_path / "blobdata"


@pytest.fixture
def settings(data_dir):
    """Standard test settings."""
    return Settings(data_dir=data_dir)


@pytest.fixture
def registry(data_dir):
    """Isolated registry rooted in the test's temp directory."""
    return LocationRegistry(default=DefaultLocationStrategy(data_dir))

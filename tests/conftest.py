import sys
from pathlib import Path

import pytest

# Make src importable without installing the package
REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"
sys.path.insert(0, str(SRC))

from clippocket.config import Settings  # noqa: E402
from clippocket.database.persistence import PersistenceGateway  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path / "data", excluded_apps=frozenset({"com.example.vault"}))


@pytest.fixture
def gateway(settings) -> PersistenceGateway:
    return PersistenceGateway(settings)

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dvrandao.core.config import Config  # noqa: E402


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config loaded from a copy of the repo defaults."""

    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(REPO_ROOT / "config" / "default.yaml", cfg_dst_dir / "default.yaml")
    return Config.from_yaml(cfg_dst_dir / "default.yaml")


@pytest.fixture(autouse=True)
def _reset_dvrandao_logging():
    """CLI runs bind handlers to the captured stderr; drop them between tests."""

    yield
    logger = logging.getLogger("dvrandao")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 项目根目录：tests/ 的上一级
ROOT = Path(__file__).resolve().parents[1]
PACKAGES_DIR = ROOT / "packages"

# 关键：把 packages 放到 sys.path 顶部（未安装时也能导入 spot_core）
sys.path.insert(0, str(PACKAGES_DIR))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SPOTGEN_ENGINE_FILE",
        "SPOTGEN_TEMPLATES_FILE",
        "SPOTGEN_RANGES_FILE",
        "SPOTGEN_THEORY_DIR",
        "SPOTGEN_MAX_RETRIES",
        "SPOTGEN_ALLIN_OPTIONS",
    ):
        monkeypatch.delenv(name, raising=False)
    from spot_core.engine.config_loader import reload_config

    reload_config()
    yield
    reload_config()

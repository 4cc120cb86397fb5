import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import yaml
import pytest
import pytest_asyncio
from infra.http_client import HttpClient


class RecordingLogger:
    """Stand-in for the loguru logger that keeps messages for assertions."""
    def __init__(self):
        self.records = []

    def _rec(self, level, msg):
        self.records.append((level, msg))

    def debug(self, msg, *a, **kw):   self._rec("DEBUG", msg)
    def info(self, msg, *a, **kw):    self._rec("INFO", msg)
    def warning(self, msg, *a, **kw): self._rec("WARNING", msg)

    def messages(self, level):
        return [m for lv, m in self.records if lv == level]


@pytest.fixture
def rec_log():
    return RecordingLogger()


@pytest.fixture
def test_cfg():
    def load_cfg():
        with open(Path(__file__).resolve().parents[1] / "config.yaml", "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    cfg = load_cfg()
    cfg["retries"]["backoff_ms"] = 1
    return cfg


@pytest_asyncio.fixture
async def http_client(test_cfg, rec_log):
    """
    以异步上下文管理 HttpClient，测试中自动清理 session。
    """
    async with HttpClient(test_cfg, logger=rec_log,
                          api_key="test_api_key", secret_key="test_secret", passphrase="test_pass") as client:
        yield client

import os
import tempfile

# Module-level settings are read at import time, so pin them before any
# testgen import happens.
_TMP_DIR = tempfile.mkdtemp(prefix="testgen-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/import_time.db"
os.environ["AI_PROVIDER"] = "mock"
os.environ["MOCK_AUTH"] = "true"
os.environ["PROMETHEUS_ENABLED"] = "true"
os.environ.pop("REDIS_URL", None)
os.environ.pop("SENTRY_DSN", None)

import pytest

from testgen import db as dbmod


@pytest.fixture(autouse=True)
def fresh_db(tmp_path):
    """Disposable SQLite DB per test."""
    dbmod.reconfigure(f"sqlite:///{tmp_path}/test_testgen.db")
    dbmod.init_db()
    yield
    dbmod.engine.dispose()

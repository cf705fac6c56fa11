import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'docschema' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from docschema.core.config import clear_all_caches
from docschema.core.registry import ModelRegistry
from docschema.core.stdlib_logging import reset_logging_for_tests
from docschema.data import clear_caches as clear_data_caches


@pytest.fixture(autouse=True)
def _reset_docschema_state(monkeypatch: pytest.MonkeyPatch):
    """Fresh config caches, no DOCSCHEMA_* overrides and no installed log handler."""
    for key in list(os.environ):
        if key.startswith("DOCSCHEMA_"):
            monkeypatch.delenv(key, raising=False)
    clear_all_caches()
    clear_data_caches()
    yield
    clear_all_caches()
    clear_data_caches()
    reset_logging_for_tests()


@pytest.fixture(scope="session")
def bundled_model():
    """The bundled document model, loaded and validated once per session.

    ``DocumentModel`` is immutable, so sharing it across tests is safe.
    """
    return ModelRegistry.load().validate()


@pytest.fixture
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty project root used as the working directory for the test."""
    monkeypatch.chdir(tmp_path)
    return tmp_path

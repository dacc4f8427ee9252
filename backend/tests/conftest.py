import os
import sys
from pathlib import Path

import pytest

# Settings are read at import time; keep tests on the in-process backend
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add the backend directory so `sewflow` package imports resolve during tests
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.append(str(BACKEND_DIR))

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from sewflow.repositories.memory import MemoryUnitOfWork  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def uow() -> MemoryUnitOfWork:
    return MemoryUnitOfWork()

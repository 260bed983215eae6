from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient

from flare.clock import FixedClock, UtcTimestamp


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(UtcTimestamp(2024, 3, 20, 0, 0, 0))


@pytest.fixture(scope="session")
def api_client() -> Iterable[TestClient]:
    from flare_api import app

    with TestClient(app) as client:
        yield client

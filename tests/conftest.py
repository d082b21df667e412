from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, Iterator, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from autoconsole.utils import ENV_PY_TRACE, ENV_SHOW_ALL


@pytest.fixture(autouse=True)
def _clean_console_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep toggles from the developer's shell out of the tests, and tests' toggles out of each other."""
    monkeypatch.delenv(ENV_PY_TRACE, raising=False)
    monkeypatch.delenv(ENV_SHOW_ALL, raising=False)
    yield
    os.environ.pop(ENV_PY_TRACE, None)
    os.environ.pop(ENV_SHOW_ALL, None)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if pytest ever generates duplicate node IDs."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        nodeid = item.nodeid
        if nodeid in seen:
            duplicates.append(nodeid)
            continue
        seen[nodeid] = 1

    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
    raise pytest.UsageError(
        "Duplicate pytest nodeids detected during collection:\n" f"{lines}"
    )

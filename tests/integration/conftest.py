from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def statpics_dir(tmp_path: Path) -> Path:
    path = tmp_path / "statpics"
    path.mkdir()
    return path

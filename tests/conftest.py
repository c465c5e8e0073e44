from __future__ import annotations

import pytest

from sievelab.runtime import reset_runtime


@pytest.fixture(autouse=True)
def isolated_runtime(tmp_path, monkeypatch):
    """Fresh runtime settings and a throwaway workspace for every test."""
    monkeypatch.setenv("SIEVELAB_HOME", str(tmp_path / "workspace"))
    rt = reset_runtime()
    yield rt
    reset_runtime()

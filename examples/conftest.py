"""Shared pytest configuration for waypost examples."""

import importlib.util
from pathlib import Path

import pytest


def _load_app(app_path: Path):
    spec = importlib.util.spec_from_file_location(f"waypost_example_{app_path.parent.name}", app_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    """A fresh App from the app.py next to the requesting test.

    app.py is re-executed for every test, so module-level data starts clean.
    """
    return _load_app(Path(request.path).parent / "app.py")

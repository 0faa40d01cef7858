"""Smoke test: verify the densenet_training package is importable."""

import densenet_training


def test_package_version() -> None:
    """Package must declare a __version__ string."""
    assert isinstance(densenet_training.__version__, str)
    assert densenet_training.__version__ == "0.1.0"

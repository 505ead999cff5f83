"""Shared fixtures for the study map tests."""

import os

# Qt must not try to open a display on CI machines
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from studymap.controller.engine import GraphEngine


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def engine():
    """Engine with an 800x600 viewport and no graph yet."""
    eng = GraphEngine(seed=7)
    eng.set_viewport(800, 600)
    return eng

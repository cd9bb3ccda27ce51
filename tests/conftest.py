# Headless test setup: force offscreen Qt and the Agg matplotlib backend,
# and provide a fallback 'qtbot' fixture if pytest-qt is not installed.
# If pytest-qt is installed, its fixture wins.

import contextlib
import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from vizengine.design.reduced_motion import set_reduced_motion

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        QApplication.instance() or QApplication(sys.argv)  # type: ignore
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        return Bot()


@pytest.fixture(autouse=True)
def _full_motion():
    # reduced motion is process global; every test starts with it off
    set_reduced_motion(False)
    yield
    set_reduced_motion(False)

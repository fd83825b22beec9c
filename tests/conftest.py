"""
Shared pytest configuration for the range list tests.

Puts the project root on sys.path, runs Qt offscreen and skips widget tests
on CI.
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from core.global_ctrl import GlobalController


def pytest_collection_modifyitems(session, config, items):
    _ = session
    _ = config

    if "CI" in os.environ or "GITHUB_ACTIONS" in os.environ:
        skip_gui = pytest.mark.skip(reason="GUI tests don't work on CI")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)


class EventRecorder:
    """Collects everything a CallbackNotifier delivers, in arrival order."""

    def __init__(self, notifier):
        self.events = []
        self.properties = []
        self.timeline = []
        notifier.subscribe(self._on_change)
        notifier.subscribe_property(self._on_property)

    def _on_change(self, sender, event):
        self.events.append(event)
        self.timeline.append(("change", event.action))

    def _on_property(self, sender, name):
        self.properties.append(name)
        self.timeline.append(("property", name))


@pytest.fixture
def record():
    """Attach an EventRecorder to a list: ``rec = record(col)``."""
    return lambda col: EventRecorder(col.notifier)


@pytest.fixture
def still_ctrl(qapp):
    """Playback settings with animations off so views settle synchronously."""
    return GlobalController(animations_enabled=False)

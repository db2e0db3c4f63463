"""Pytest configuration for the `tests/` suite.

Provides a scripted random source so tests can drive exact mutation branches,
and a sample manifest shared by several modules.
"""

from __future__ import annotations

import copy
import json
import random

import pytest


class ScriptedRandom(random.Random):
    """
    Random source whose ``random()`` replays a fixed list of values.

    Once the script is exhausted every call returns ``fallback``. Shuffles
    keep using the seeded bit generator and never consume scripted values.
    """

    def __new__(cls, *args, **kwargs):
        # the base type would try to seed itself from the scripted values
        return super().__new__(cls)

    def __init__(self, values=(), fallback: float = 0.99, seed: int = 0):
        super().__init__(seed)
        self.values = list(values)
        self.fallback = fallback
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.fallback

    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


SAMPLE_PACKAGE_JSON = {
    "name": "test-package",
    "version": "1.0.0",
    "dependencies": {
        "express": "^4.17.1",
        "react": "^17.0.2",
        "lodash": "~4.17.21",
    },
    "devDependencies": {
        "typescript": "^4.5.4",
        "jest": "^27.4.7",
    },
    "peerDependencies": {
        "react": "^17.0.0",
    },
}


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def sample_pkg():
    return copy.deepcopy(SAMPLE_PACKAGE_JSON)


@pytest.fixture
def package_file(tmp_path, sample_pkg):
    path = tmp_path / "package.json"
    path.write_text(json.dumps(sample_pkg, indent=2), encoding="utf-8")
    return path

import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

import pytest

from tests.helpers import make_level_env


@pytest.fixture
def level_env():
    """Bus, world and a started 8x8 level painted with a known single-move layout."""
    return make_level_env()

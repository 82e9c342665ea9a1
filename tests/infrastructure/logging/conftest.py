import logging

import pytest


@pytest.fixture(autouse=True)
def debug_root_level():
    """Let every level through so records reach the patched ``_log``."""
    root = logging.getLogger()
    level = root.level
    root.setLevel(logging.DEBUG)
    yield
    root.setLevel(level)

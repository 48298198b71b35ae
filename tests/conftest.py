import random

import pytest


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so speaker selection is reproducible."""
    return random.Random(7)

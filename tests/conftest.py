import os
import sys

# Ensure the local source package is importable for tests
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

import pytest

from slotcraft.services.data_loader import load_game_data
from slotcraft.services.game_manager import GameManager


def pytest_configure(config):
    # Random draft rolls and random targets use a fixed seed unless a test seeds its own game
    os.environ['SLOTCRAFT_DETERMINISTIC'] = '1'


@pytest.fixture(scope='session')
def game_data():
    return load_game_data()


@pytest.fixture
def manager(game_data):
    return GameManager(data=game_data, seed=7)


@pytest.fixture
def events(manager):
    recorded = []
    manager.subscribe(lambda event_type, payload: recorded.append((event_type, payload)))
    return recorded

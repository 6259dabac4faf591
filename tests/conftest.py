"""Shared test fixtures."""

import pytest

from src.main import App, build_app
from src.rb_clearing.infrastructure.custody import InMemoryCustody

OWNER = "admin"
ALICE = "alice"
BOB = "bob"

# scenario market: tick spacing 60 over [-360, 360] -> bins -6..6
TICK_SPACING = 60
MIN_TICK = -360
MAX_TICK = 360


@pytest.fixture
def custody() -> InMemoryCustody:
    return InMemoryCustody(wallets={ALICE: 10**15, BOB: 10**15})


@pytest.fixture
def app(custody: InMemoryCustody) -> App:
    """Engine over the in-memory ledger with an initialized program."""
    app = build_app(custody=custody)
    app.markets.initialize_program(OWNER)
    return app


@pytest.fixture
def market_id(app: App) -> int:
    return app.markets.create_market(OWNER, TICK_SPACING, MIN_TICK, MAX_TICK, close_ts=2_000_000_000).id

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from sticker_engine import StickerItem, StickerLayoutConfig  # noqa: E402
from managers.referral_manager import ReferralManager  # noqa: E402


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def items():
    return [
        StickerItem(id=0, image="snowflake.png", link="https://example.com/a"),
        StickerItem(id=1, image="board.png", link="https://example.com/b"),
        StickerItem(id=2, image="goggles.png", link="https://example.com/c"),
    ]


@pytest.fixture
def reference_config():
    config = StickerLayoutConfig()
    config.base_count = 20
    config.min_count = 10
    config.reference_width = 1920
    config.reference_height = 1080
    return config


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def referral_manager(clock):
    manager = ReferralManager(
        ":memory:",
        base_url="https://lessons.example.com/",
        form_url="https://forms.example.com/survey?lang=en",
        clock=clock,
    )
    manager.initialize()
    yield manager
    manager.close()

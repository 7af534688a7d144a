"""Pytest fixtures for Grinch's Gift Catch tests."""
import random

import pytest

from giftcatch.config.settings import Settings
from giftcatch.core.events import Event, EventBus
from giftcatch.game.actors import FallingObject, Variant
from giftcatch.game.session import GameSession


SEED = 1234


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float = 0.5):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class Recorder:
    """Collects every event published on a bus."""

    def __init__(self, bus: EventBus):
        self.events: list[Event] = []
        bus.subscribe_all(self.events.append)

    def types(self) -> list:
        return [e.type for e in self.events]

    def of(self, event_type) -> list[Event]:
        return [e for e in self.events if e.type == event_type]


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(SEED)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus) -> Recorder:
    return Recorder(bus)


@pytest.fixture
def make_session(settings, bus):
    """Factory for started sessions that never spawn on their own."""

    def factory(config: Settings | None = None, seed: int = SEED, spawning: bool = False) -> GameSession:
        session = GameSession(config or settings, random.Random(seed), bus)
        session.start("Cindy Lou")
        if not spawning:
            quiet(session)
        return session

    return factory


@pytest.fixture
def session(make_session) -> GameSession:
    return make_session()


def quiet(session: GameSession) -> None:
    """Push the next spawn out of reach."""
    session.spawner.next_spawn_at = float("inf")


def drop(
    session: GameSession,
    variant: Variant = Variant.REWARD,
    x: float | None = None,
    y: float | None = None,
    fall_speed: float = 0.0,
    size: float = 25.0,
) -> FallingObject:
    """Place an object in the session, by default right on the player."""
    player = session.player
    obj = FallingObject(
        id=len(session.objects) + 1000,
        x=player.x + 15 if x is None else x,
        y=player.y if y is None else y,
        width=size,
        height=size,
        fall_speed=fall_speed,
        variant=variant,
    )
    session.objects.append(obj)
    return obj

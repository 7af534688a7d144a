"""
Game session: the single owner of all simulation state.

A session holds the actors, the falling objects (in spawn order), the
bonus round and the score. Each call to tick() runs one frame to
completion:

    input -> player -> emitter -> spawner -> object motion
          -> collisions -> ground loss -> difficulty -> bonus trigger

While the bonus round or its countdown is active the session is
SUSPENDED and tick() only advances the bonus timers.

Every event produced during a tick is published on the event bus and
also returned to the caller.
"""

import logging
import random
from typing import Optional

from giftcatch.config.settings import Settings, get_settings
from giftcatch.core.clock import clamp_delta
from giftcatch.core.errors import InvalidTransitionError, InvalidUsernameError
from giftcatch.core.events import Event, EventBus, EventType
from giftcatch.core.state import State, StateMachine
from giftcatch.game.actors import Emitter, FallingObject, Player, Variant
from giftcatch.game.bonus import BonusRound
from giftcatch.game.collision import check_ground_loss, resolve_collisions
from giftcatch.game.difficulty import DifficultyTracker
from giftcatch.game.emitter import EmitterController
from giftcatch.game.intent import IDLE, InputState
from giftcatch.game.motion import ObjectMover
from giftcatch.game.player import PlayerController
from giftcatch.game.snapshot import (
    BonusView,
    EmitterView,
    ObjectView,
    PlayerView,
    SessionSnapshot,
)
from giftcatch.game.spawner import Spawner

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 20


def validate_username(username: str) -> str:
    """
    Trim and check a player name.

    Returns:
        The trimmed name

    Raises:
        InvalidUsernameError: If the name is empty, too short or too long
    """
    name = (username or "").strip()
    if not name:
        raise InvalidUsernameError("Please enter a username")
    if len(name) < USERNAME_MIN_LENGTH:
        raise InvalidUsernameError(f"Username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(name) > USERNAME_MAX_LENGTH:
        raise InvalidUsernameError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")
    return name


class GameSession:
    """
    One game instance.

    Usage:
        session = GameSession(settings, random.Random(42), bus)
        session.start("Cindy Lou")
        events = session.tick(delta, keyboard.poll())
        frame = session.snapshot()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        event_bus: EventBus | None = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.seed)
        self.event_bus = event_bus or EventBus()

        self.state_machine = StateMachine()
        self.state_machine.add_listener(self._on_state_change)

        # Controllers share the one random source
        self._player_ctl = PlayerController(self.settings.player)
        self._emitter_ctl = EmitterController(self.settings.emitter, self.rng)
        self.spawner = Spawner(self.settings.spawn, self.rng)
        self._mover = ObjectMover(self.settings.playfield, self.settings.motion)
        self._difficulty = DifficultyTracker(self.settings.difficulty)
        self.bonus = BonusRound(settings=self.settings.bonus, rng=self.rng)

        self.username = ""
        self.session_id = 0
        self.game_over_reason: Optional[str] = None
        self._torn_down = False
        self._events: list[Event] = []

        self._reset()

    # Properties

    @property
    def state(self) -> State:
        return self.state_machine.state

    @property
    def difficulty_level(self) -> int:
        return self._difficulty.level

    @property
    def next_spawn_at(self) -> Optional[float]:
        return self.spawner.next_spawn_at

    @property
    def is_suspended(self) -> bool:
        return self.state == State.SUSPENDED

    # Lifecycle

    def start(self, username: str) -> None:
        """
        Start a new game for a player.

        Raises:
            InvalidUsernameError: If the name fails validation
            InvalidTransitionError: If a game is already running
        """
        name = validate_username(username)
        if self.state_machine.is_live:
            raise InvalidTransitionError(self.state.name, State.PLAYING.name)

        self.username = name
        self._begin()

    def restart(self) -> None:
        """
        Start over with the same player.

        Allowed after game over and during a game. Every piece of state
        goes back to its defaults.

        Raises:
            InvalidTransitionError: If no player has been entered yet
        """
        if self.state == State.AWAITING_NAME:
            raise InvalidTransitionError(self.state.name, State.PLAYING.name)
        self._begin()

    def change_player(self) -> None:
        """Go back to name entry after a game over."""
        self.state_machine.transition(State.AWAITING_NAME)
        self.username = ""

    def teardown(self) -> None:
        """Stop all timers; the session ignores ticks until started again."""
        self.bonus.cancel()
        self._torn_down = True
        logger.info(f"Session {self.session_id} torn down")

    def _begin(self) -> None:
        self._reset()
        self.session_id += 1
        self._torn_down = False

        if self.state != State.PLAYING:
            self.state_machine.transition(State.PLAYING)

        self._publish(Event(
            EventType.GAME_STARTED,
            data={"session_id": self.session_id, "username": self.username},
            source="session",
        ))
        self._flush()
        logger.info(f"Session {self.session_id} started for {self.username}")

    def _reset(self) -> None:
        """Back to the defaults of a fresh game."""
        self.score = 0
        self.elapsed_time = 0.0
        self.game_over_reason = None
        self.player: Player = self._player_ctl.create()
        self.emitter: Emitter = self._emitter_ctl.create()
        self.objects: list[FallingObject] = []
        self.spawner.reset()
        self._difficulty.reset()
        self.bonus.reset()

    # Frame update

    def tick(self, delta: float, intent: InputState = IDLE) -> list[Event]:
        """
        Run one frame.

        Args:
            delta: Seconds since the previous frame, clamped here
            intent: Held directions this frame

        Returns:
            Events emitted during this frame, in order
        """
        if self._torn_down or not self.state_machine.is_live:
            return []

        delta = clamp_delta(delta, self.settings.display.max_delta)

        if self.state == State.SUSPENDED:
            self._tick_suspended(delta)
        else:
            self._tick_playing(delta, intent)

        return self._flush()

    def _tick_playing(self, delta: float, intent: InputState) -> None:
        playfield = self.settings.playfield
        now = self.elapsed_time
        difficulty = self._difficulty.level

        self._player_ctl.update(self.player, intent, now, delta, playfield.width)
        self._emitter_ctl.update(self.emitter, delta, now, difficulty, playfield.width)
        self.spawner.update(self.objects, self.emitter, now, difficulty)
        self._mover.update(self.objects, self.player, delta)

        outcome = resolve_collisions(self.objects, self.player)
        for obj in outcome.caught:
            if obj.variant is Variant.HAZARD:
                self._publish(self._object_event(EventType.HAZARD_HIT, obj))
                self._end("hazard")
                return
            elif obj.variant is Variant.IMPAIRER:
                self._player_ctl.impair(self.player, now)
                self._publish(self._object_event(EventType.IMPAIRER_HIT, obj))
            else:
                self.score += 1
                self._publish(self._object_event(EventType.SCORE_INCREASED, obj))

        if check_ground_loss(self.objects, playfield.ground_y) is not None:
            self._end("ground")
            return

        self.elapsed_time += delta
        if self._difficulty.update(self.elapsed_time):
            logger.info(f"Difficulty increased to {self._difficulty.level}")

        opened = self.bonus.check_trigger(self.score)
        if opened is not None:
            self.state_machine.transition(State.SUSPENDED)
            self._publish(opened)

    def _tick_suspended(self, delta: float) -> None:
        for event in self.bonus.update(delta):
            if event.type == EventType.BONUS_RESOLVED and event.data.get("win"):
                self._apply_bonus_win(event)
            self._publish(event)

        if not self.bonus.is_active:
            self.state_machine.transition(State.PLAYING)
            self._publish(Event(
                EventType.GAME_RESUMED,
                data={"session_id": self.session_id},
                source="session",
            ))

    def _apply_bonus_win(self, event: Event) -> None:
        self.score *= self.settings.bonus.multiplier
        event.data["score"] = self.score
        logger.info(f"Bonus win, score doubled to {self.score}")

    def _end(self, reason: str) -> None:
        self.game_over_reason = reason
        self.bonus.cancel()
        self.state_machine.transition(State.GAME_OVER)
        self._publish(Event(
            EventType.GAME_OVER,
            data={
                "session_id": self.session_id,
                "username": self.username,
                "score": self.score,
                "reason": reason,
                "difficulty": self._difficulty.level,
                "elapsed": self.elapsed_time,
            },
            source="session",
        ))
        logger.info(f"Game over ({reason}): {self.username} scored {self.score}")

    # Bonus actions

    def spin_bonus(self) -> bool:
        """Spin the bonus reels. Returns False if the spin was ignored."""
        if self._torn_down or self.state != State.SUSPENDED:
            return False
        event = self.bonus.spin()
        if event is None:
            return False
        self._publish(event)
        self._flush()
        return True

    def decline_bonus(self) -> bool:
        """Skip the offered bonus round. Returns False if nothing was open."""
        if self._torn_down or self.state != State.SUSPENDED:
            return False
        event = self.bonus.decline()
        if event is None:
            return False
        self._publish(event)
        self._flush()
        return True

    # Views

    def snapshot(self) -> SessionSnapshot:
        """Read-only copy of everything a renderer needs."""
        return SessionSnapshot(
            session_id=self.session_id,
            state=self.state,
            username=self.username,
            score=self.score,
            difficulty=self._difficulty.level,
            elapsed=self.elapsed_time,
            player=PlayerView.of(self.player),
            emitter=EmitterView.of(self.emitter),
            objects=tuple(ObjectView.of(obj) for obj in self.objects),
            bonus=BonusView.of(self.bonus),
            game_over_reason=self.game_over_reason,
        )

    # Event plumbing

    def _object_event(self, event_type: EventType, obj: FallingObject) -> Event:
        return Event(
            event_type,
            data={
                "id": obj.id,
                "variant": obj.variant.value,
                "x": obj.center_x,
                "y": obj.center_y,
                "score": self.score,
            },
            source="session",
        )

    def _on_state_change(self, old: State, new: State) -> None:
        self._publish(Event(
            EventType.STATE_CHANGED,
            data={"from": old.name, "to": new.name},
            source="session",
        ))

    def _publish(self, event: Event) -> None:
        self._events.append(event)
        self.event_bus.emit(event)

    def _flush(self) -> list[Event]:
        events, self._events = self._events, []
        return events

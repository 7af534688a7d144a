"""Player, emitter, spawner, motion, collision and difficulty rules."""
import math
import random

import pytest

from giftcatch.config.settings import (
    DifficultySettings,
    EmitterSettings,
    PlayerSettings,
    PlayfieldSettings,
    SpawnSettings,
)
from giftcatch.game.actors import Actor, FallingObject, Variant
from giftcatch.game.collision import check_ground_loss, resolve_collisions
from giftcatch.game.difficulty import DifficultyTracker, difficulty_level
from giftcatch.game.emitter import EmitterController
from giftcatch.game.intent import IDLE, InputState
from giftcatch.game.motion import ObjectMover, is_off_playfield, step_homing
from giftcatch.game.player import PlayerController
from giftcatch.game.spawner import Spawner

from tests.conftest import FixedRandom

WIDTH = 800


def gift(obj_id=1, x=0.0, y=0.0, variant=Variant.REWARD, fall_speed=150.0, size=25.0):
    return FallingObject(x=x, y=y, width=size, height=size, id=obj_id, fall_speed=fall_speed, variant=variant)


class TestActor:

    def test_overlap(self):
        a = Actor(0, 0, 10, 10)
        assert a.overlaps(Actor(5, 5, 10, 10))
        assert not a.overlaps(Actor(10, 0, 10, 10))
        assert not a.overlaps(Actor(0, 20, 10, 10))

    def test_center(self):
        a = Actor(10, 20, 30, 40)
        assert (a.center_x, a.center_y) == (25, 40)


class TestPlayerController:

    def setup_method(self):
        self.ctl = PlayerController(PlayerSettings())
        self.player = self.ctl.create()

    def test_starting_position(self):
        assert (self.player.x, self.player.y) == (375, 520)
        assert (self.player.width, self.player.height) == (50, 60)

    def test_moves_at_speed(self):
        self.ctl.update(self.player, InputState(left=True), 0.0, 0.1, WIDTH)
        assert self.player.x == pytest.approx(345)

    @pytest.mark.parametrize("delta", [0.001, 0.01, 1 / 30])
    def test_clamped_to_playfield(self, delta):
        for _ in range(int(5 / delta)):
            self.ctl.update(self.player, InputState(right=True), 0.0, delta, WIDTH)
            assert 0 <= self.player.x <= WIDTH - self.player.width
        assert self.player.x == WIDTH - self.player.width

    def test_impaired_player_ignores_input(self):
        self.ctl.impair(self.player, now=1.0)
        self.ctl.update(self.player, InputState(right=True), 2.9, 0.1, WIDTH)
        assert self.player.x == 375
        assert self.player.impaired

    def test_impairment_expires_at_deadline(self):
        self.ctl.impair(self.player, now=1.0)
        self.ctl.update(self.player, InputState(right=True), 3.0, 0.1, WIDTH)
        assert not self.player.impaired
        assert self.player.x == pytest.approx(405)

    def test_walk_cycle(self):
        self.ctl.update(self.player, InputState(right=True), 0.0, 0.1, WIDTH)
        assert self.player.leg_phase == pytest.approx(30 * 0.1)

        self.ctl.update(self.player, IDLE, 0.0, 0.1, WIDTH)
        assert self.player.leg_phase == 0.0

    def test_walk_cycle_wraps(self):
        for _ in range(50):
            self.ctl.update(self.player, InputState(left=True), 0.0, 0.01, WIDTH)
            assert 0 <= self.player.leg_phase < 2 * math.pi


class TestEmitterController:

    def setup_method(self):
        self.ctl = EmitterController(EmitterSettings(), random.Random(7))
        self.emitter = self.ctl.create()

    def test_initial_state(self):
        motion = self.emitter.motion
        assert (self.emitter.x, self.emitter.y) == (100, 50)
        assert motion.direction == 1
        assert motion.velocity == 0
        assert motion.target_velocity == 100
        assert not motion.facing_left

    def test_extents_follow_facing(self):
        assert self.ctl.extents(self.emitter) == (15, 290)
        self.emitter.motion.facing_left = True
        assert self.ctl.extents(self.emitter) == (290, 15)

    def test_eases_toward_target(self):
        self.ctl.update(self.emitter, 0.1, 0.0, 0, WIDTH)
        assert self.emitter.motion.velocity == pytest.approx(50)

    def test_flips_when_segment_expires(self):
        flipped = self.ctl.update(self.emitter, 1.6, 0.0, 0, WIDTH)
        motion = self.emitter.motion
        assert flipped
        assert motion.direction == -1
        assert motion.facing_left
        assert motion.segment_elapsed == 0
        assert motion.flip_cooldown == 0.5
        assert 0.5 <= motion.segment_duration <= 2.0
        assert 50 <= motion.target_velocity <= 150

    def test_cooldown_blocks_flip(self):
        self.emitter.motion.flip_cooldown = 0.5
        self.emitter.motion.segment_elapsed = 10.0
        assert not self.ctl.update(self.emitter, 0.1, 0.0, 0, WIDTH)

    def test_flips_near_edge(self):
        self.emitter.x = WIDTH - 290 - 10
        assert self.ctl.update(self.emitter, 0.01, 0.0, 0, WIDTH)

    def test_stays_within_extents(self):
        for i in range(3000):
            self.ctl.update(self.emitter, 1 / 60, i / 60, 3, WIDTH)
            assert 15 <= self.emitter.x <= WIDTH - 15

    def test_segment_ranges_scale_with_difficulty(self):
        (min_dur, max_dur), (min_speed, max_speed) = self.ctl.segment_ranges(2)
        assert (min_dur, max_dur) == pytest.approx((1.3, 1.7))
        assert (min_speed, max_speed) == (90, 210)

    def test_segment_durations_have_floors(self):
        (min_dur, max_dur), _ = self.ctl.segment_ranges(50)
        assert (min_dur, max_dur) == (0.5, 0.8)


class TestSpawner:

    def test_interval_curve(self):
        spawner = Spawner(SpawnSettings())
        assert spawner.spawn_interval(0) == 2.5
        assert spawner.spawn_interval(2) == pytest.approx(1.9)
        assert spawner.spawn_interval(10) == 0.8

    def test_probabilities_are_capped(self):
        spawner = Spawner(SpawnSettings())
        assert spawner.hazard_chance(0) == pytest.approx(0.12)
        assert spawner.hazard_chance(100) == 0.25
        assert spawner.impairer_chance(1) == pytest.approx(0.12)
        assert spawner.impairer_chance(100) == 0.20
        assert spawner.offset_range(100) == 100
        assert spawner.fall_speed(2) == 250

    @pytest.mark.parametrize("roll, variant", [
        (0.05, Variant.HAZARD),
        (0.15, Variant.IMPAIRER),
        (0.3, Variant.REWARD),
        (0.99, Variant.REWARD),
    ])
    def test_variant_choice(self, roll, variant):
        spawner = Spawner(SpawnSettings(), FixedRandom(roll))
        assert spawner.choose_variant(0) is variant

    def test_schedule_jitter(self):
        spawner = Spawner(SpawnSettings(), random.Random(5))
        for _ in range(100):
            at = spawner.schedule(10.0, 0)
            assert 10.0 + 2.5 * 0.6 <= at <= 10.0 + 2.5 * 1.4

    def test_first_update_only_schedules(self, rng):
        spawner = Spawner(SpawnSettings(), rng)
        emitter = EmitterController(EmitterSettings(), rng).create()
        objects = []

        assert spawner.update(objects, emitter, 0.0, 0) is None
        assert objects == []
        assert spawner.next_spawn_at > 0

    def test_spawn_when_due(self):
        spawner = Spawner(SpawnSettings(), FixedRandom(0.5))
        emitter = EmitterController(EmitterSettings(), FixedRandom(0.5)).create()
        objects = []
        spawner.next_spawn_at = 1.0

        obj = spawner.update(objects, emitter, 1.0, 0)

        assert objects == [obj]
        assert obj.id == 1
        assert obj.variant is Variant.REWARD
        assert obj.x == emitter.center_x
        assert obj.y == emitter.y + 50
        assert obj.fall_speed == 150
        assert spawner.next_spawn_at == pytest.approx(1.0 + 2.5)

    def test_ids_increase(self, rng):
        spawner = Spawner(SpawnSettings(), rng)
        emitter = EmitterController(EmitterSettings(), rng).create()
        ids = [spawner.spawn(emitter, 0).id for _ in range(3)]
        assert ids == [1, 2, 3]

        spawner.reset()
        assert spawner.spawn(emitter, 0).id == 1
        assert spawner.next_spawn_at is None


class TestMotion:

    def test_straight_fall(self):
        mover = ObjectMover()
        obj = gift(y=100)
        mover.update([obj], Actor(375, 520, 50, 60), 0.1)
        assert (obj.x, obj.y) == (0, 115)

    def test_homing_bends_toward_target(self):
        target = Actor(375, 520, 50, 60)
        obj = gift(x=100, y=100, variant=Variant.IMPAIRER)
        step_homing(obj, target, 0.1)
        assert obj.x > 100
        assert obj.y > 100

    def test_homing_always_descends(self):
        target = Actor(0, 0, 10, 10)
        obj = gift(x=5, y=300, variant=Variant.IMPAIRER)
        step_homing(obj, target, 0.1)
        assert obj.y > 300

    def test_homing_on_target_falls(self):
        target = Actor(0, 0, 25, 25)
        obj = gift(variant=Variant.IMPAIRER)
        step_homing(obj, target, 0.1)
        assert obj.x == 0
        assert obj.y == pytest.approx(150 * 0.8 * 0.1)

    def test_off_playfield(self):
        playfield = PlayfieldSettings()
        assert is_off_playfield(gift(y=651), playfield)
        assert is_off_playfield(gift(x=-51), playfield)
        assert is_off_playfield(gift(x=851), playfield)
        assert not is_off_playfield(gift(x=400, y=600), playfield)

    def test_removal_keeps_order(self):
        mover = ObjectMover()
        objects = [gift(1, y=10), gift(2, y=700), gift(3, y=20)]
        removed = mover.update(objects, Actor(0, 0, 1, 1), 0.0)
        assert [o.id for o in objects] == [1, 3]
        assert [o.id for o in removed] == [2]


class TestCollisions:

    def setup_method(self):
        self.player = Actor(375, 520, 50, 60)

    def test_each_object_caught_once(self):
        objects = [gift(1, 390, 520), gift(2, 390, 520, Variant.IMPAIRER), gift(3, 10, 10)]
        outcome = resolve_collisions(objects, self.player)

        assert outcome.score_gained == 1
        assert outcome.impaired
        assert not outcome.hazard_hit
        assert [o.id for o in objects] == [3]
        assert resolve_collisions(objects, self.player).caught == []

    def test_hazard_stops_scan(self):
        objects = [gift(1, 390, 520), gift(2, 390, 520, Variant.HAZARD), gift(3, 390, 520)]
        outcome = resolve_collisions(objects, self.player)

        assert outcome.hazard.id == 2
        assert outcome.score_gained == 1
        assert [o.id for o in outcome.caught] == [1, 2]
        assert [o.id for o in objects] == [3]

    def test_ground_loss_only_for_gifts(self):
        ground = 540
        objects = [gift(1, y=545, variant=Variant.HAZARD), gift(2, y=545, variant=Variant.IMPAIRER)]
        assert check_ground_loss(objects, ground) is None

        objects.append(gift(3, y=541))
        assert check_ground_loss(objects, ground).id == 3

    def test_gift_exactly_on_ground_line_is_safe(self):
        assert check_ground_loss([gift(y=540)], 540) is None


class TestDifficulty:

    @pytest.mark.parametrize("elapsed, level", [
        (0, 0), (-3, 0), (9.99, 0), (10, 1), (25, 2), (100.5, 10),
    ])
    def test_floor_of_tier(self, elapsed, level):
        assert difficulty_level(elapsed) == level

    def test_monotonic(self):
        levels = [difficulty_level(t / 10) for t in range(0, 1000)]
        assert levels == sorted(levels)

    def test_tracker_reports_increase(self):
        tracker = DifficultyTracker(DifficultySettings())
        assert not tracker.update(5.0)
        assert tracker.update(10.0)
        assert not tracker.update(12.0)
        assert tracker.level == 1

        tracker.reset()
        assert tracker.level == 0

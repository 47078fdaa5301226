"""Tests for the Catch the Zzz simulation, driven with synthetic ticks."""

import pytest

from dream_rhythm.config import (
    TICK_SEC,
    FALL_DURATION_SEC,
    SPAWN_MARGIN,
    SPAWN_Y,
    MOON_RADIUS,
    GAME_LIVES,
    MAX_TICKS_PER_ADVANCE,
)
from dream_rhythm.game import Bubble, CatchTheZzz, GameState

WIDTH = 400
HEIGHT = 560


@pytest.fixture
def payouts():
    return []


@pytest.fixture
def game(rng, payouts):
    g = CatchTheZzz(WIDTH, HEIGHT, rng=rng, on_game_over=payouts.append)
    g.start()
    return g


def far_bubble(game, age=0.0):
    """A bubble well away from the moon, near the left edge."""
    return Bubble(x=SPAWN_MARGIN, y=game.height - 300, age=age)


class TestStates:
    def test_starts_in_menu(self, rng):
        g = CatchTheZzz(WIDTH, HEIGHT, rng=rng)
        assert g.state == GameState.MENU
        assert g.advance(1.0) == 0

    def test_start_resets(self, game):
        assert game.state == GameState.PLAYING
        assert game.score == 0
        assert game.lives == GAME_LIVES
        assert game.bubbles == []

    def test_back_to_menu_only_from_game_over(self, game):
        game.back_to_menu()
        assert game.state == GameState.PLAYING

    def test_abandon_discards_without_payout(self, game, payouts):
        game.score = 30
        game.abandon()
        assert game.state == GameState.MENU
        assert payouts == []
        assert game.bubbles == []

    def test_replay_after_game_over(self, game, payouts):
        game.lives = 1
        game.bubbles.append(far_bubble(game, age=FALL_DURATION_SEC))
        game.tick()
        assert game.state == GameState.GAME_OVER
        game.start()
        assert game.state == GameState.PLAYING
        assert game.lives == GAME_LIVES
        assert game.last_reward is None
        game.lives = 1
        game.bubbles.append(far_bubble(game, age=FALL_DURATION_SEC))
        game.tick()
        game.back_to_menu()
        assert game.state == GameState.MENU
        assert payouts == [1, 1]


class TestSpawning:
    def test_first_spawn_after_interval(self, game):
        for _ in range(89):
            game.tick()
        assert game.bubbles == []
        game.tick()
        assert len(game.bubbles) == 1

    def test_spawn_period(self, game):
        for _ in range(90 * 2):
            game.tick()
        # The first bubble is still well above the moon
        assert len(game.bubbles) == 2

    def test_spawn_position(self, game):
        for _ in range(50):
            b = game.spawn()
            assert SPAWN_MARGIN <= b.x <= WIDTH - SPAWN_MARGIN
            assert b.y == SPAWN_Y


class TestMovement:
    def test_bubbles_fall_at_constant_rate(self, game):
        b = far_bubble(game)
        game.bubbles.append(b)
        start = b.y
        game.tick()
        assert b.y - start == pytest.approx(game.fall_speed * TICK_SEC)

    def test_reaches_bottom_after_fall_duration(self, game):
        assert game.fall_speed * FALL_DURATION_SEC == pytest.approx(game.bottom_edge - SPAWN_Y)

    def test_avatar_is_clamped(self, game):
        game.move_avatar(1000)
        assert game.avatar_offset == WIDTH / 2 - MOON_RADIUS
        game.move_avatar(-1000)
        assert game.avatar_offset == -(WIDTH / 2 - MOON_RADIUS)
        game.move_avatar(25)
        assert game.avatar_position == (WIDTH / 2 + 25, HEIGHT - 100)

    def test_advance_runs_fixed_ticks(self, game):
        assert game.advance(TICK_SEC * 10.5) == 10
        # Leftover half tick completes on the next call
        assert game.advance(TICK_SEC * 0.6) == 1

    def test_advance_is_capped(self, game):
        assert game.advance(10.0) == MAX_TICKS_PER_ADVANCE


class TestCollisions:
    def test_catch_scores(self, game):
        ax, ay = game.avatar_position
        game.bubbles.append(Bubble(x=ax, y=ay - 10))
        game.tick()
        assert game.score == 1
        assert game.bubbles == []

    def test_one_catch_per_tick(self, game):
        ax, ay = game.avatar_position
        game.bubbles.append(Bubble(x=ax, y=ay - 10))
        game.bubbles.append(Bubble(x=ax + 5, y=ay - 10))
        game.tick()
        assert game.score == 1
        assert len(game.bubbles) == 1
        game.tick()
        assert game.score == 2

    def test_near_miss_does_not_score(self, game):
        ax, ay = game.avatar_position
        game.bubbles.append(Bubble(x=ax + 60, y=ay))
        game.tick()
        assert game.score == 0
        assert len(game.bubbles) == 1

    def test_escape_costs_a_life(self, game):
        game.bubbles.append(far_bubble(game, age=FALL_DURATION_SEC - TICK_SEC))
        game.tick()
        assert game.lives == GAME_LIVES - 1
        assert game.bubbles == []
        assert game.state == GameState.PLAYING

    def test_last_life_ends_game_with_payout(self, game, payouts):
        game.score = 12
        game.lives = 1
        game.bubbles.append(far_bubble(game, age=FALL_DURATION_SEC))
        game.tick()
        assert game.state == GameState.GAME_OVER
        assert game.last_reward == 2
        assert payouts == [2]

        # Nothing happens after the game is over
        game.tick()
        game.advance(1.0)
        assert payouts == [2]

    def test_minimum_payout_is_one(self, game, payouts):
        game.lives = 1
        game.bubbles.append(far_bubble(game, age=FALL_DURATION_SEC))
        game.tick()
        assert payouts == [1]


def test_full_game_with_static_moon(rng, payouts):
    g = CatchTheZzz(WIDTH, HEIGHT, rng=rng, on_game_over=payouts.append)
    g.start()
    for _ in range(100_000):
        if g.state != GameState.PLAYING:
            break
        g.tick()
    assert g.state == GameState.GAME_OVER
    assert g.lives == 0
    assert payouts == [max(1, g.score // 5)]

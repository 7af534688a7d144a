"""Leaderboard store, HTTP client and game-over reporter."""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from giftcatch.config.settings import LeaderboardSettings
from giftcatch.core.errors import LeaderboardError
from giftcatch.core.events import Event, EventType
from giftcatch.game.actors import Variant
from giftcatch.leaderboard import (
    LeaderboardClient,
    LeaderboardEntry,
    LeaderboardStore,
    SaveResult,
    ScoreReporter,
    best_per_player,
    clamp_limit,
    create_sink,
)

from tests.conftest import drop


def entry(entry_id, username, score):
    return LeaderboardEntry(id=entry_id, username=username, score=score, created_at="2024-12-24T00:00:00+00:00")


class FakeSink:
    """Records saves and returns a canned result."""

    def __init__(self, result=None, error=None):
        self.saved = []
        self.result = result or SaveResult(success=True)
        self.error = error

    async def save_score(self, username, score):
        self.saved.append((username, score))
        if self.error:
            raise self.error
        return self.result


def game_over(username="Cindy Lou", score=12, session_id=3):
    return Event(
        EventType.GAME_OVER,
        data={"username": username, "score": score, "session_id": session_id, "reason": "hazard"},
    )


class TestRanking:

    @pytest.mark.parametrize("limit, expected", [(0, 1), (-5, 1), (10, 10), (100, 100), (500, 100)])
    def test_clamp_limit(self, limit, expected):
        assert clamp_limit(limit) == expected

    def test_best_per_player(self):
        entries = [
            entry(1, "max", 5),
            entry(2, "cindy", 9),
            entry(3, "max", 12),
            entry(4, "lou", 9),
            entry(5, "cindy", 3),
        ]
        ranked = best_per_player(entries)
        assert [(e.username, e.score) for e in ranked] == [("max", 12), ("cindy", 9), ("lou", 9)]

    def test_equal_scores_keep_earliest(self):
        ranked = best_per_player([entry(1, "max", 7), entry(2, "max", 7)])
        assert [e.id for e in ranked] == [1]

    def test_limit(self):
        entries = [entry(i, f"player{i}", i) for i in range(1, 30)]
        assert len(best_per_player(entries, 5)) == 5
        assert best_per_player(entries, 0)[0].score == 29


class TestLeaderboardStore:

    def test_add_and_query(self, tmp_path):
        store = LeaderboardStore(tmp_path / "board.json")
        store.add("Cindy Lou", 14)
        store.add("Max", 20)

        assert len(store) == 2
        assert [e.username for e in store.top_scores()] == ["Max", "Cindy Lou"]
        assert store.all_scores()[0].score == 20

    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "data" / "board.json"
        LeaderboardStore(path).add("Max", 3)

        reloaded = LeaderboardStore(path)
        assert len(reloaded) == 1
        assert reloaded.add("Max", 4).id == 2

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert [item["score"] for item in data] == [3, 4]

    def test_scores_are_never_overwritten(self, tmp_path):
        store = LeaderboardStore(tmp_path / "board.json")
        store.add("Max", 10)
        store.add("Max", 2)
        assert [e.score for e in store.all_scores()] == [10, 2]
        assert [e.score for e in store.top_scores()] == [10]

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text("{not json", encoding="utf-8")

        store = LeaderboardStore(path)
        assert len(store) == 0

    def test_write_failure_rolls_back(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = LeaderboardStore(blocker / "board.json")

        with pytest.raises(LeaderboardError):
            store.add("Max", 5)
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_save_score(self, tmp_path):
        store = LeaderboardStore(tmp_path / "board.json")
        result = await store.save_score("Max", 8)

        assert result.success
        assert result.entry.username == "Max"
        assert result.entry.score == 8

    @pytest.mark.asyncio
    async def test_save_score_failure_is_a_result(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = LeaderboardStore(blocker / "board.json")

        result = await store.save_score("Max", 8)

        assert not result.success
        assert "Failed to save leaderboard" in result.error


class TestLeaderboardClient:

    def setup_method(self):
        self.client = LeaderboardClient("http://scores.local/", timeout=2.0)
        self.session = MagicMock()
        self.session.closed = False
        self.client._session = self.session

    def respond(self, method, status=200, body=None):
        response = MagicMock()
        response.status = status
        response.json = AsyncMock(return_value=body)
        getattr(self.session, method).return_value.__aenter__.return_value = response
        return response

    def test_url(self):
        assert self.client.url == "http://scores.local/api/leaderboard"

    @pytest.mark.asyncio
    async def test_save_score_success(self):
        self.respond("post", 201, {"id": 7, "username": "Max", "score": 9, "createdAt": "2024-12-24"})

        result = await self.client.save_score("Max", 9)

        assert result.success
        assert result.entry.id == 7
        assert result.entry.created_at == "2024-12-24"
        self.session.post.assert_called_once_with(
            "http://scores.local/api/leaderboard", json={"username": "Max", "score": 9}
        )

    @pytest.mark.asyncio
    async def test_save_score_http_error(self):
        self.respond("post", 500)
        result = await self.client.save_score("Max", 9)
        assert not result.success
        assert result.error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_save_score_timeout(self):
        self.session.post.side_effect = asyncio.TimeoutError()
        result = await self.client.save_score("Max", 9)
        assert result.error == "TIMEOUT"

    @pytest.mark.asyncio
    async def test_save_score_network_error(self):
        self.session.post.side_effect = aiohttp.ClientConnectionError("refused")
        result = await self.client.save_score("Max", 9)
        assert result.error == "NETWORK_ERROR"

    @pytest.mark.asyncio
    async def test_save_score_bad_body(self):
        self.respond("post", 200, {"id": "seven"})
        result = await self.client.save_score("Max", 9)
        assert result.error == "BAD_RESPONSE"

    @pytest.mark.asyncio
    async def test_top_scores(self):
        self.respond("get", 200, [
            {"id": 1, "username": "Max", "score": 30, "created_at": "a"},
            {"id": 2, "username": "Cindy", "score": 20, "created_at": "b"},
        ])

        entries = await self.client.top_scores(500)

        assert [e.username for e in entries] == ["Max", "Cindy"]
        _, kwargs = self.session.get.call_args
        assert kwargs["params"] == {"limit": "100"}

    @pytest.mark.asyncio
    async def test_top_scores_failure_is_empty(self):
        self.respond("get", 503)
        assert await self.client.top_scores() == []

        self.session.get.side_effect = aiohttp.ClientConnectionError()
        assert await self.client.top_scores() == []

    @pytest.mark.asyncio
    async def test_close(self):
        self.session.close = AsyncMock()
        await self.client.close()

        self.session.close.assert_awaited_once()
        assert self.client._session is None

    @pytest.mark.asyncio
    async def test_creates_session_lazily(self):
        client = LeaderboardClient("http://scores.local")
        session = await client._get_session()

        assert isinstance(session, aiohttp.ClientSession)
        assert await client._get_session() is session
        await client.close()


class TestCreateSink:

    def test_file_backend(self, tmp_path):
        sink = create_sink(LeaderboardSettings(backend="file", file_path=tmp_path / "b.json"))
        assert isinstance(sink, LeaderboardStore)

    def test_http_backend(self):
        sink = create_sink(LeaderboardSettings(backend="http", base_url="http://x"))
        assert isinstance(sink, LeaderboardClient)


class TestScoreReporter:

    @pytest.mark.asyncio
    async def test_saves_on_game_over(self, bus, recorder):
        sink = FakeSink()
        reporter = ScoreReporter(bus, sink)

        bus.emit(game_over())
        assert reporter.pending == 1
        await reporter.flush()

        assert sink.saved == [("Cindy Lou", 12)]
        (saved,) = recorder.of(EventType.SCORE_SAVED)
        assert saved.data["session_id"] == 3
        assert reporter.last_result.success

    @pytest.mark.asyncio
    async def test_failure_event(self, bus, recorder):
        sink = FakeSink(SaveResult(success=False, error="HTTP 500"))
        reporter = ScoreReporter(bus, sink)

        bus.emit(game_over())
        await reporter.flush()

        (failed,) = recorder.of(EventType.SCORE_SAVE_FAILED)
        assert failed.data["error"] == "HTTP 500"

    @pytest.mark.asyncio
    async def test_sink_exception_becomes_failure(self, bus, recorder):
        reporter = ScoreReporter(bus, FakeSink(error=RuntimeError("disk on fire")))

        bus.emit(game_over())
        await reporter.flush()

        (failed,) = recorder.of(EventType.SCORE_SAVE_FAILED)
        assert failed.data["error"] == "disk on fire"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username, score", [("", 10), ("Max", 0)])
    async def test_skips_empty_games(self, bus, username, score):
        sink = FakeSink()
        reporter = ScoreReporter(bus, sink)

        bus.emit(game_over(username=username, score=score))
        await reporter.flush()

        assert sink.saved == []

    def test_without_event_loop(self, bus):
        sink = FakeSink()
        reporter = ScoreReporter(bus, sink)

        bus.emit(game_over())
        assert reporter.pending == 0

    @pytest.mark.asyncio
    async def test_close_unsubscribes(self, bus):
        sink = FakeSink()
        reporter = ScoreReporter(bus, sink)
        reporter.close()

        bus.emit(game_over())
        await reporter.flush()
        assert sink.saved == []

    @pytest.mark.asyncio
    async def test_end_to_end_with_session(self, bus, recorder, make_session, tmp_path):
        store = LeaderboardStore(tmp_path / "board.json")
        reporter = ScoreReporter(bus, store)
        session = make_session()
        session.score = 4
        drop(session, Variant.HAZARD)

        session.tick(1 / 60)
        await reporter.flush()

        assert [(e.username, e.score) for e in store.top_scores()] == [("Cindy Lou", 4)]
        assert len(recorder.of(EventType.SCORE_SAVED)) == 1

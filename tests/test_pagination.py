import pytest

from conftest import (
    FakeResponse,
    FakeSession,
    FakeTokenProvider,
    RecordedCall,
    SleepRecorder,
)
from ofsc.core.models import (
    Credentials,
    PageProgress,
    PaginationStrategy,
    ThrottleConfig,
)
from ofsc.core.pagination import PaginatedCollector
from ofsc.core.requester import ResilientRequester
from ofsc.exceptions import RequestError

BASE = "https://acme.fs.ocs.oraclecloud.com/rest/ofscCore/v1/things/"


def build_url(offset: int, limit: int) -> str:
    return f"{BASE}?offset={offset}&limit={limit}"


def paged_backend(page_sizes: list[int], total: int, echoed_limit: int | None = None):
    """Serve pages of the given sizes in order, then empty pages."""
    served = iter(page_sizes)

    def handler(call: RecordedCall) -> FakeResponse:
        offset = int(call.query["offset"])
        size = next(served, 0)
        items = [{"id": offset + i} for i in range(size)]
        limit = echoed_limit if echoed_limit is not None else int(call.query["limit"])
        return FakeResponse(
            200,
            {"items": items, "offset": offset, "limit": limit, "totalResults": total},
        )

    return handler


def make_collector(
    session: FakeSession,
    credentials: Credentials,
    token_provider: FakeTokenProvider,
    sleep: SleepRecorder,
    **kwargs,
) -> PaginatedCollector:
    requester = ResilientRequester(
        session=session,
        credentials=credentials,
        token_provider=token_provider,
        sleep=sleep,
    )
    return PaginatedCollector(requester, **kwargs)


class TestTotalResultsStrategy:
    """Tests for offset advance by items received, stopping at totalResults."""

    async def test_stops_when_total_reached(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that pages [1000, 1000, 400] of 2400 take exactly 3 calls."""
        session = FakeSession(paged_backend([1000, 1000, 400], total=2400))
        collector = make_collector(
            session, credentials, token_provider, sleep, page_size=1000
        )

        result = await collector.collect_all(build_url, "t")

        assert len(result.items) == 2400
        assert len(session.calls) == 3
        assert result.pages_fetched == 3
        assert [c.query["offset"] for c in session.calls] == ["0", "1000", "2000"]
        assert [item["id"] for item in result.items] == list(range(2400))

    async def test_short_page_does_not_end_pass(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that fewer items than requested advance by the count received."""
        session = FakeSession(paged_backend([100, 60, 100, 40], total=300))
        collector = make_collector(session, credentials, token_provider, sleep)

        result = await collector.collect_all(build_url, "t")

        assert len(result.items) == 300
        assert [c.query["offset"] for c in session.calls] == ["0", "100", "160", "260"]

    async def test_empty_page_halts_despite_total(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that an empty page stops even if totalResults says more remain."""
        session = FakeSession(paged_backend([100, 0, 100], total=5000))
        collector = make_collector(session, credentials, token_provider, sleep)

        result = await collector.collect_all(build_url, "t")

        assert len(result.items) == 100
        assert len(session.calls) == 2

    async def test_has_more_false_stops_zone_style(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that payloads without totalResults stop on hasMore=false."""
        session = FakeSession(
            [
                FakeResponse(200, {"items": [{"id": 1}, {"id": 2}], "hasMore": True}),
                FakeResponse(200, {"items": [{"id": 3}], "hasMore": False}),
            ]
        )
        collector = make_collector(
            session, credentials, token_provider, sleep, page_size=2
        )

        result = await collector.collect_all(build_url, "t")

        assert [item["id"] for item in result.items] == [1, 2, 3]
        assert len(session.calls) == 2


class TestLimitAdvanceStrategy:
    """Tests for offset advance by the server-echoed limit."""

    async def test_advances_by_echoed_limit(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that the echoed limit, not the requested one, drives the offset."""
        session = FakeSession(paged_backend([500, 500, 200], total=0, echoed_limit=500))
        collector = make_collector(
            session,
            credentials,
            token_provider,
            sleep,
            strategy=PaginationStrategy.LIMIT_ADVANCE,
            page_size=1000,
        )

        result = await collector.collect_all(build_url, "t")

        assert len(result.items) == 1200
        assert [c.query["offset"] for c in session.calls] == [
            "0",
            "500",
            "1000",
            "1500",
        ]
        assert [c.query["limit"] for c in session.calls] == [
            "1000",
            "500",
            "500",
            "500",
        ]

    async def test_stops_only_on_empty_page(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that totalResults is ignored and an empty page ends the pass."""
        session = FakeSession(paged_backend([1000, 1000, 400], total=2400))
        collector = make_collector(
            session,
            credentials,
            token_provider,
            sleep,
            strategy=PaginationStrategy.LIMIT_ADVANCE,
            page_size=1000,
        )

        result = await collector.collect_all(build_url, "t")

        assert len(result.items) == 2400
        assert len(session.calls) == 4

    async def test_missing_limit_falls_back_to_requested(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that a payload without limit advances by the requested limit."""
        session = FakeSession(
            [
                FakeResponse(200, {"items": [{"id": 1}]}),
                FakeResponse(200, {"items": []}),
            ]
        )
        collector = make_collector(
            session,
            credentials,
            token_provider,
            sleep,
            strategy=PaginationStrategy.LIMIT_ADVANCE,
            page_size=50,
        )

        await collector.collect_all(build_url, "t")

        assert session.calls[1].query["offset"] == "50"


class TestTokenAndProgress:
    """Tests for token threading, progress and throttling across pages."""

    async def test_latest_token_is_conserved(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that a token renewed mid-pass is used for later pages and returned."""
        backend = paged_backend([10, 10, 5], total=25)
        responses = iter([FakeResponse(401)])

        def handler(call: RecordedCall) -> FakeResponse:
            if call.query["offset"] == "10":
                pending = next(responses, None)
                if pending is not None:
                    return pending
            return backend(call)

        session = FakeSession(handler)
        collector = make_collector(
            session, credentials, token_provider, sleep, page_size=10
        )

        result = await collector.collect_all(build_url, "start")

        bearers = [c.bearer for c in session.calls]
        assert bearers == ["start", "start", "token-1", "token-1"]
        assert result.token == "token-1"
        assert len(result.items) == 25

    async def test_progress_reported_after_each_page(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that the progress callback sees running totals."""
        progress: list[PageProgress] = []
        session = FakeSession(paged_backend([10, 10, 5], total=25))
        collector = make_collector(
            session,
            credentials,
            token_provider,
            sleep,
            page_size=10,
            on_progress=progress.append,
        )

        await collector.collect_all(build_url, "t")

        assert progress == [
            PageProgress(1, 10, 10),
            PageProgress(2, 10, 20),
            PageProgress(3, 5, 25),
        ]

    async def test_pause_before_every_twentieth_fetch(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that fetch 20 and 40 of a 45-page pass are preceded by a pause."""
        session = FakeSession(paged_backend([1] * 45, total=45))
        collector = make_collector(
            session, credentials, token_provider, sleep, page_size=1
        )

        result = await collector.collect_all(build_url, "t")

        assert len(result.items) == 45
        assert sleep.delays == [10.0, 10.0]

    async def test_throttle_counter_is_per_pass(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that two 15-page passes never reach the 20th-call pause."""
        collector = make_collector(
            FakeSession(paged_backend([1] * 15, total=15)),
            credentials,
            token_provider,
            sleep,
            page_size=1,
        )
        await collector.collect_all(build_url, "t")
        collector.requester.session = FakeSession(paged_backend([1] * 15, total=15))
        await collector.collect_all(build_url, "t")

        assert sleep.delays == []

    async def test_throttle_can_be_disabled(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that every_n_calls=0 never pauses."""
        session = FakeSession(paged_backend([1] * 25, total=25))
        collector = make_collector(
            session,
            credentials,
            token_provider,
            sleep,
            page_size=1,
            throttle=ThrottleConfig(every_n_calls=0),
        )

        await collector.collect_all(build_url, "t")

        assert sleep.delays == []

    async def test_page_error_aborts_pass(
        self, credentials, token_provider, sleep
    ) -> None:
        """Test that a failing page propagates instead of returning partial items."""
        session = FakeSession(
            [
                FakeResponse(200, {"items": [{"id": 1}], "totalResults": 3}),
                FakeResponse(500, text="server error"),
            ]
        )
        collector = make_collector(
            session, credentials, token_provider, sleep, page_size=1
        )

        with pytest.raises(RequestError):
            await collector.collect_all(build_url, "t")

    @pytest.mark.parametrize(
        argnames="response",
        argvalues=[
            FakeResponse(200, [{"id": 2}]),
            FakeResponse(200, text="null"),
            FakeResponse(200, text=""),
        ],
    )
    async def test_non_object_page_is_an_error(
        self, credentials, token_provider, sleep, response: FakeResponse
    ) -> None:
        """Test that a page that is not a JSON object is not taken as the end."""
        session = FakeSession(
            [FakeResponse(200, {"items": [{"id": 1}], "totalResults": 3}), response]
        )
        collector = make_collector(
            session, credentials, token_provider, sleep, page_size=1
        )

        with pytest.raises(RequestError, match="Malformed page"):
            await collector.collect_all(build_url, "t")

        assert len(session.calls) == 2

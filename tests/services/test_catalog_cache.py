"""CatalogService 캐시 정책 테스트 (httpx.MockTransport, 네트워크 없음)"""

import json
import os
import time

import httpx
import pytest

from kappa_tracker.services.catalog_service import (
    STATIONS_CACHE_FILE,
    TASKS_CACHE_FILE,
    CatalogService,
)
from kappa_tracker.services.errors import CatalogUnavailableError


def _make_stale(path, hours=48):
    past = time.time() - hours * 60 * 60
    os.utime(path, (past, past))


class _Recorder:
    """요청 기록 + 고정 응답"""

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.payload = payload
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


def _service(cache_dir, handler) -> CatalogService:
    return CatalogService(
        endpoint="https://catalog.test/graphql",
        cache_dir=cache_dir,
        ttl_hours=24,
        transport=httpx.MockTransport(handler),
    )


class TestFreshCache:
    def test_fresh_cache_skips_network(self, catalog_dir):
        recorder = _Recorder(500)
        service = _service(catalog_dir, recorder)

        quests = service.get_quests()
        stations = service.get_stations()

        assert [q.quest_id for q in quests] == ["debut", "checking", "shortage", "minute"]
        assert [s.station_id for s in stations] == ["lavatory", "water"]
        assert recorder.requests == []

    def test_parsed_result_is_memoized(self, catalog_service):
        assert catalog_service.get_quests() is catalog_service.get_quests()

    def test_next_edges_and_overrides_applied(self, catalog_service):
        by_id = {quest.quest_id: quest for quest in catalog_service.get_quests()}
        debut = by_id["debut"]
        minute = by_id["minute"]
        assert debut.next_quest_ids == ("checking",)
        assert minute.edition_requirement == "Edge of Darkness"

    def test_cache_status(self, catalog_service, catalog_dir):
        assert catalog_service.cache_status() == {
            TASKS_CACHE_FILE: "fresh",
            STATIONS_CACHE_FILE: "fresh",
        }
        _make_stale(catalog_dir / TASKS_CACHE_FILE)
        (catalog_dir / STATIONS_CACHE_FILE).unlink()
        assert catalog_service.cache_status() == {
            TASKS_CACHE_FILE: "stale",
            STATIONS_CACHE_FILE: "missing",
        }


class TestStaleCache:
    def test_stale_cache_refetched(self, catalog_dir, tasks_payload):
        _make_stale(catalog_dir / TASKS_CACHE_FILE)
        recorder = _Recorder(200, {"data": {"tasks": tasks_payload[:1]}})
        service = _service(catalog_dir, recorder)

        quests = service.get_quests()

        assert [q.quest_id for q in quests] == ["debut"]
        assert len(recorder.requests) == 1
        body = json.loads(recorder.requests[0].content)
        assert "tasks" in body["query"]
        written = json.loads((catalog_dir / TASKS_CACHE_FILE).read_text(encoding="utf-8"))
        assert [task["id"] for task in written] == ["debut"]

    def test_fetch_failure_falls_back_to_stale(self, catalog_dir):
        _make_stale(catalog_dir / TASKS_CACHE_FILE)
        service = _service(catalog_dir, _Recorder(503))

        quests = service.get_quests()

        assert len(quests) == 4

    def test_response_without_data_falls_back(self, catalog_dir):
        _make_stale(catalog_dir / STATIONS_CACHE_FILE)
        service = _service(catalog_dir, _Recorder(200, {"errors": [{"message": "boom"}]}))

        assert len(service.get_stations()) == 2

    def test_stations_connection_shape(self, tmp_path, stations_payload):
        recorder = _Recorder(
            200, {"data": {"hideoutStations": {"nodes": stations_payload}}}
        )
        service = _service(tmp_path, recorder)

        stations = service.get_stations()

        assert [s.station_id for s in stations] == ["lavatory", "water"]
        assert (tmp_path / STATIONS_CACHE_FILE).exists()


class TestUnavailable:
    def test_no_cache_and_fetch_failure(self, tmp_path):
        service = _service(tmp_path, _Recorder(500))
        with pytest.raises(CatalogUnavailableError):
            service.get_quests()

    def test_unreadable_cache_treated_as_missing(self, tmp_path):
        (tmp_path / TASKS_CACHE_FILE).write_text("{not json", encoding="utf-8")
        service = _service(tmp_path, _Recorder(500))
        with pytest.raises(CatalogUnavailableError):
            service.get_quests()

    def test_transport_error(self, tmp_path):
        def _refuse(request):
            raise httpx.ConnectError("refused", request=request)

        service = _service(tmp_path, _refuse)
        with pytest.raises(CatalogUnavailableError):
            service.get_stations()

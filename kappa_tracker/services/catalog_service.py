"""Catalog Service: tarkov.dev GraphQL 조회 + 파일 캐시

캐시 정책:
- 캐시 파일이 TTL 이내면 그대로 사용
- 아니면 새로 조회 후 파일 갱신
- 조회 실패 시 오래된 캐시라도 사용, 캐시도 없으면 CatalogUnavailableError
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from kappa_tracker.core.catalog.models import Quest, Station
from kappa_tracker.core.catalog.parser import (
    parse_stations,
    parse_tasks,
    unwrap_connection,
)
from kappa_tracker.services.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

TASKS_CACHE_FILE = "tasks.json"
STATIONS_CACHE_FILE = "hideoutStations.json"

TASKS_QUERY = """
query TasksRef {
  tasks {
    id
    name
    wikiLink
    kappaRequired
    lightkeeperRequired
    minPlayerLevel
    requiredPrestige { prestigeLevel }
    trader { name }
    map { id name normalizedName }
    taskRequirements { task { id name } status }
    traderRequirements { requirementType compareMethod value trader { name } }
    objectives {
      id
      type
      description
      maps { id name normalizedName }
      ... on TaskObjectiveItem {
        items { id name shortName iconLink wikiLink }
        count
        foundInRaid
      }
    }
  }
}
"""

STATIONS_QUERY = """
query HideoutStationsRef {
  hideoutStations {
    id
    name
    normalizedName
    levels {
      id
      level
      itemRequirements {
        count
        quantity
        attributes { type name value }
        item { id name shortName iconLink wikiLink }
      }
      stationLevelRequirements { id level station { id name } }
      traderRequirements { id requirementType compareMethod value trader { name } }
    }
  }
}
"""


class CatalogService:
    """외부 카탈로그 접근. 파싱된 엔티티만 밖으로 내보낸다."""

    def __init__(
        self,
        endpoint: str,
        cache_dir: str | Path,
        ttl_hours: float = 24,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint
        self._cache_dir = Path(cache_dir)
        self._ttl_seconds = ttl_hours * 60 * 60
        self._timeout = timeout
        self._transport = transport
        # file_name → (mtime, 파싱 결과)
        self._parsed: dict[str, tuple[float, list]] = {}

    # === 공개 API ===

    def get_quests(self) -> list[Quest]:
        return self._load(TASKS_CACHE_FILE, self._fetch_tasks, parse_tasks)

    def get_stations(self) -> list[Station]:
        return self._load(STATIONS_CACHE_FILE, self._fetch_stations, parse_stations)

    def cache_status(self) -> dict[str, str]:
        """캐시 파일별 상태: fresh | stale | missing"""
        status: dict[str, str] = {}
        for file_name in (TASKS_CACHE_FILE, STATIONS_CACHE_FILE):
            path = self._cache_path(file_name)
            if not path.exists():
                status[file_name] = "missing"
            else:
                status[file_name] = "fresh" if self._is_fresh(path) else "stale"
        return status

    # === 캐시 ===

    def _cache_path(self, file_name: str) -> Path:
        return self._cache_dir / file_name

    def _is_fresh(self, path: Path) -> bool:
        try:
            age = time.time() - path.stat().st_mtime
        except OSError:
            return False
        return age < self._ttl_seconds

    def _read_cache(self, file_name: str) -> Optional[list]:
        path = self._cache_path(file_name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Unreadable catalog cache %s: %s", path, e)
            return None
        return data if isinstance(data, list) else None

    def _write_cache(self, file_name: str, data: list) -> None:
        path = self._cache_path(file_name)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to write catalog cache %s: %s", path, e)

    def _cached_or_fetch(self, file_name: str, fetch: Callable[[], list]) -> list:
        if self._is_fresh(self._cache_path(file_name)):
            cached = self._read_cache(file_name)
            if cached is not None:
                logger.debug("Catalog cache hit: %s", file_name)
                return cached

        try:
            data = fetch()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Failed to fetch %s, falling back to stale cache: %s", file_name, e
            )
            cached = self._read_cache(file_name)
            if cached is not None:
                return cached
            raise CatalogUnavailableError(f"failed to load catalog: {file_name}") from e

        self._write_cache(file_name, data)
        logger.info("Fetched catalog %s (%d entries)", file_name, len(data))
        return data

    def _load(
        self,
        file_name: str,
        fetch: Callable[[], list],
        parse: Callable[[Any], list],
    ) -> list:
        raw = self._cached_or_fetch(file_name, fetch)

        path = self._cache_path(file_name)
        try:
            mtime = path.stat().st_mtime
        except OSError:
            return parse(raw)

        memo = self._parsed.get(file_name)
        if memo is not None and memo[0] == mtime:
            return memo[1]
        parsed = parse(raw)
        self._parsed[file_name] = (mtime, parsed)
        return parsed

    # === GraphQL ===

    def _post(self, query: str) -> dict:
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            response = client.post(
                self._endpoint,
                json={"query": query},
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise ValueError("GraphQL response has no data")
        return payload["data"]

    def _fetch_tasks(self) -> list:
        tasks = self._post(TASKS_QUERY).get("tasks")
        return tasks if isinstance(tasks, list) else []

    def _fetch_stations(self) -> list:
        return unwrap_connection(self._post(STATIONS_QUERY).get("hideoutStations"))

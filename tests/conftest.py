"""Shared test fixtures."""

import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kappa_tracker.db.database import get_db, make_engine
from kappa_tracker.db.models import Base
from kappa_tracker.main import app
from kappa_tracker.services.catalog_service import (
    STATIONS_CACHE_FILE,
    TASKS_CACHE_FILE,
    CatalogService,
)

TEST_ENGINE = make_engine("sqlite:///:memory:", poolclass=StaticPool)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


# === 카탈로그 픽스처 (tarkov.dev 응답 형태) ===

SALEWA = {"id": "salewa", "name": "Salewa first aid kit", "shortName": "Salewa"}
AI2 = {"id": "ai2", "name": "AI-2 medkit", "shortName": "AI-2"}
ROUBLES = {"id": "roubles", "name": "Roubles", "shortName": "RUB"}
MS2000 = {"id": "ms2000", "name": "MS2000 Marker", "shortName": "MS2000"}
TOILET_PAPER = {"id": "tp", "name": "Toilet paper", "shortName": "TP"}

TASKS = [
    {
        "id": "debut",
        "name": "Debut",
        "trader": {"name": "Prapor"},
        "map": {"name": "Customs"},
        "minPlayerLevel": 1,
        "kappaRequired": True,
        "lightkeeperRequired": False,
        "taskRequirements": [],
        "traderRequirements": [],
        "objectives": [
            {
                "id": "debut_salewa",
                "type": "giveItem",
                "description": "Hand over 2 Salewa first aid kits found in raid",
                "items": [SALEWA],
                "count": 2,
                "foundInRaid": True,
            },
            {
                "id": "debut_roubles",
                "type": "giveItem",
                "description": "Hand over 50000 Roubles",
                "items": [ROUBLES],
                "count": 50000,
                "foundInRaid": False,
            },
        ],
    },
    {
        "id": "checking",
        "name": "Checking",
        "trader": {"name": "Prapor"},
        "map": {"name": "Customs"},
        "minPlayerLevel": 15,
        "kappaRequired": True,
        "lightkeeperRequired": False,
        "taskRequirements": [{"task": {"id": "debut", "name": "Debut"}, "status": ["complete"]}],
        "traderRequirements": [],
        "objectives": [
            {
                "id": "checking_salewa",
                "type": "giveItem",
                "description": "Hand over the Salewa",
                "items": [SALEWA],
                "count": 1,
                "foundInRaid": False,
            },
            {
                "id": "checking_meds",
                "type": "giveItem",
                "description": "Hand over any medkit",
                "items": [SALEWA, AI2],
                "count": 1,
                "foundInRaid": False,
            },
        ],
    },
    {
        "id": "shortage",
        "name": "Shortage",
        "trader": {"name": "Therapist"},
        "map": None,
        "kappaRequired": False,
        "lightkeeperRequired": True,
        "taskRequirements": [{"task": {"id": "checking", "name": "Checking"}}],
        "traderRequirements": [
            {"requirementType": "loyaltyLevel", "compareMethod": ">=", "value": 2, "trader": {"name": "Therapist"}}
        ],
        "objectives": [
            {
                "id": "shortage_marker",
                "type": "mark",
                "description": "Mark the fuel tank with an MS2000 Marker",
                "maps": [{"id": "m1", "name": "Woods", "normalizedName": "woods"}],
                "items": [MS2000],
                "count": 1,
            }
        ],
    },
    {
        "id": "minute",
        "name": "Minute of Fame",
        "trader": {"name": "Prapor"},
        "map": {"name": "Customs"},
        "kappaRequired": False,
        "lightkeeperRequired": False,
        "objectives": [],
    },
]

STATIONS = [
    {
        "id": "lavatory",
        "name": "Lavatory",
        "normalizedName": "lavatory",
        "levels": [
            {
                "id": "lav-1",
                "level": 1,
                "itemRequirements": [
                    {
                        "quantity": 2,
                        "item": TOILET_PAPER,
                        "attributes": [{"type": "foundInRaid", "name": "found_in_raid", "value": "true"}],
                    }
                ],
                "stationLevelRequirements": [],
                "traderRequirements": [],
            },
            {
                "id": "lav-2",
                "level": 2,
                "itemRequirements": [{"count": 3, "item": SALEWA, "attributes": []}],
                "stationLevelRequirements": [
                    {"id": "r1", "level": 1, "station": {"id": "water", "name": "Water Collector"}}
                ],
                "traderRequirements": [
                    {"id": "t1", "requirementType": "loyaltyLevel", "compareMethod": ">=", "value": 2, "trader": {"name": "Therapist"}}
                ],
            },
        ],
    },
    {
        "id": "water",
        "name": "Water Collector",
        "normalizedName": "water-collector",
        "levels": [
            {
                "id": "water-1",
                "level": 1,
                "itemRequirements": [{"quantity": 100000, "item": ROUBLES}],
            }
        ],
    },
]


def _offline(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"errors": [{"message": "offline"}]})


@pytest.fixture(autouse=True)
def reset_database():
    """테스트마다 빈 스키마"""
    Base.metadata.create_all(TEST_ENGINE)
    yield
    Base.metadata.drop_all(TEST_ENGINE)


@pytest.fixture()
def tasks_payload() -> list:
    return json.loads(json.dumps(TASKS))


@pytest.fixture()
def stations_payload() -> list:
    return json.loads(json.dumps(STATIONS))


@pytest.fixture()
def catalog_dir(tmp_path: Path, tasks_payload, stations_payload) -> Path:
    """fixture 카탈로그가 채워진 캐시 디렉터리"""
    (tmp_path / TASKS_CACHE_FILE).write_text(json.dumps(tasks_payload), encoding="utf-8")
    (tmp_path / STATIONS_CACHE_FILE).write_text(
        json.dumps(stations_payload), encoding="utf-8"
    )
    return tmp_path


@pytest.fixture()
def catalog_service(catalog_dir: Path) -> CatalogService:
    """네트워크 없이 캐시만 쓰는 CatalogService"""
    return CatalogService(
        endpoint="https://catalog.test/graphql",
        cache_dir=catalog_dir,
        transport=httpx.MockTransport(_offline),
    )


@pytest.fixture()
def client_factory(catalog_service: CatalogService):
    """쿠키 저장소가 따로인 TestClient 생성기 (사용자별 1개)"""
    app.state.catalog_service = catalog_service

    def _make() -> TestClient:
        return TestClient(app)

    return _make


@pytest.fixture()
def client(client_factory) -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    return client_factory()


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()

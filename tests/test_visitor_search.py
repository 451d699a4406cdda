from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from kiosk.models.visit import Visit
from kiosk.services.visitor_service import VisitorService
from kiosk.utils.clock import utcnow


def _add_visits(db_session, rows):
    now = utcnow()
    for i, (name, email) in enumerate(rows):
        db_session.add(Visit(full_name=name, email=email, created_at=now - timedelta(minutes=len(rows) - i)))
    db_session.commit()


def test_short_query_returns_empty_without_database_access():
    db = MagicMock()
    assert VisitorService.search_visitors(db, "al") == []
    assert VisitorService.search_visitors(db, "  al  ") == []
    db.query.assert_not_called()


def test_database_error_degrades_to_empty_list():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
    assert VisitorService.search_visitors(db, "alex") == []


def test_search_matches_substring_case_insensitively(client, db_session):
    _add_visits(db_session, [
        ("Alex Smith", "alex@x.com"),
        ("Jordan Alexander", "jordan@x.com"),
        ("Sam Lee", "sam@x.com"),
    ])

    resp = client.get("/api/visitors/search", params={"q": "ALEX"})
    assert resp.status_code == 200
    assert resp.json() == [
        {"full_name": "Jordan Alexander", "email": "jordan@x.com"},
        {"full_name": "Alex Smith", "email": "alex@x.com"},
    ]


def test_search_deduplicates_pairs_keeping_most_recent(client, db_session):
    _add_visits(db_session, [
        ("alex smith", "ALEX@x.com"),
        ("Alex Smith", "alex@x.com"),
        ("Alex Smith", "alex@work.com"),
    ])

    results = client.get("/api/visitors/search", params={"q": "ale"}).json()
    assert results == [
        {"full_name": "Alex Smith", "email": "alex@work.com"},
        {"full_name": "Alex Smith", "email": "alex@x.com"},
    ]


def test_search_returns_at_most_ten(client, db_session):
    _add_visits(db_session, [(f"Alex {i}", f"alex{i}@x.com") for i in range(15)])

    results = client.get("/api/visitors/search", params={"q": "alex"}).json()
    assert len(results) == 10
    assert results[0]["full_name"] == "Alex 14"


def test_search_short_query_over_http(client):
    assert client.get("/api/visitors/search", params={"q": "al"}).json() == []
    assert client.get("/api/visitors/search").json() == []


def test_search_folds_non_ascii_case(client, db_session):
    _add_visits(db_session, [("ÉLODIE Martin", "elodie@x.com"), ("Élodie Martin", "ELODIE@x.com")])

    results = client.get("/api/visitors/search", params={"q": "élodie"}).json()
    assert results == [{"full_name": "Élodie Martin", "email": "ELODIE@x.com"}]

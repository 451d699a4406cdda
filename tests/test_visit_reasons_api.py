from datetime import timedelta

from kiosk.models.visit_reason import VisitReason
from kiosk.utils.clock import utcnow


def _create(client, label, **extra):
    resp = client.post("/api/admin/visit-reasons", json={"label": label, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_admin_reason_endpoints_require_session(client):
    assert client.get("/api/admin/visit-reasons").status_code == 401
    assert client.post("/api/admin/visit-reasons", json={"label": "x"}).status_code == 401
    assert client.patch("/api/admin/visit-reasons/1", json={"active": False}).status_code == 401


def test_create_reason_derives_slug_and_defaults(admin_client):
    reason = _create(admin_client, "  Meeting someone ")
    assert reason["label"] == "Meeting someone"
    assert reason["slug"] == "meeting-someone"
    assert reason["active"] is True
    assert reason["sort_order"] == 0
    assert reason["source"] == "MANUAL"
    assert reason["featured"] is False


def test_create_reason_with_explicit_slug(admin_client):
    reason = _create(admin_client, "Attending an event", slug=" Launch Party ", category="EVENT")
    assert reason["slug"] == "launch-party"
    assert reason["category"] == "EVENT"


def test_create_reason_rejects_blank_label_and_duplicate_slug(admin_client):
    assert admin_client.post("/api/admin/visit-reasons", json={"label": "   "}).status_code == 422
    _create(admin_client, "Delivery")
    assert admin_client.post("/api/admin/visit-reasons", json={"label": "delivery"}).status_code == 409


def test_public_listing_only_active_and_ordered(admin_client):
    _create(admin_client, "Zumba", sort_order=1)
    _create(admin_client, "Art", sort_order=1)
    _create(admin_client, "Coworking", sort_order=0)
    _create(admin_client, "Hidden", sort_order=0, active=False)

    resp = admin_client.get("/api/visit-reasons")
    assert resp.status_code == 200
    assert [r["label"] for r in resp.json()] == ["Coworking", "Art", "Zumba"]
    assert set(resp.json()[0]) == {"id", "label", "slug", "featured", "category"}


def test_public_listing_filters_by_category(admin_client):
    _create(admin_client, "Demo night", category="EVENT")
    _create(admin_client, "Coworking", category="GENERAL")

    resp = admin_client.get("/api/visit-reasons", params={"category": "EVENT"})
    assert [r["label"] for r in resp.json()] == ["Demo night"]


def test_update_reason_fields(admin_client):
    reason = _create(admin_client, "Interview")
    resp = admin_client.patch(
        f"/api/admin/visit-reasons/{reason['id']}",
        json={"label": "Job interview", "active": False, "sort_order": 4},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["label"] == "Job interview"
    assert body["active"] is False
    assert body["sort_order"] == 4
    assert body["slug"] == "interview"


def test_update_unknown_reason_is_404(admin_client):
    assert admin_client.patch("/api/admin/visit-reasons/999", json={"active": False}).status_code == 404


def test_featuring_fourth_reason_is_rejected(admin_client, db_session):
    reasons = [_create(admin_client, f"Event {i}") for i in range(4)]
    for r in reasons[:3]:
        resp = admin_client.patch(f"/api/admin/visit-reasons/{r['id']}", json={"featured": True})
        assert resp.status_code == 200
        assert resp.json()["featured"] is True
        assert resp.json()["featured_at"] is not None

    resp = admin_client.patch(
        f"/api/admin/visit-reasons/{reasons[3]['id']}",
        json={"featured": True, "label": "Renamed"},
    )
    assert resp.status_code == 400
    assert "Cannot feature more than 3" in resp.json()["detail"]

    fourth = db_session.get(VisitReason, reasons[3]["id"])
    assert fourth.featured is False
    assert fourth.featured_at is None
    assert fourth.label == "Event 3"
    assert db_session.query(VisitReason).filter(VisitReason.featured.is_(True)).count() == 3


def test_refeaturing_an_already_featured_reason_is_allowed(admin_client):
    reasons = [_create(admin_client, f"Event {i}") for i in range(3)]
    for r in reasons:
        admin_client.patch(f"/api/admin/visit-reasons/{r['id']}", json={"featured": True})

    resp = admin_client.patch(f"/api/admin/visit-reasons/{reasons[0]['id']}", json={"featured": True})
    assert resp.status_code == 200


def test_unfeature_always_succeeds_and_clears_timestamp(admin_client):
    reason = _create(admin_client, "Talk")
    admin_client.patch(f"/api/admin/visit-reasons/{reason['id']}", json={"featured": True})

    resp = admin_client.patch(f"/api/admin/visit-reasons/{reason['id']}", json={"featured": False})
    assert resp.status_code == 200
    assert resp.json()["featured"] is False
    assert resp.json()["featured_at"] is None


def test_stale_featured_reasons_do_not_count_toward_cap(admin_client, db_session):
    reasons = [_create(admin_client, f"Event {i}") for i in range(4)]
    for r in reasons[:3]:
        admin_client.patch(f"/api/admin/visit-reasons/{r['id']}", json={"featured": True})

    stale = db_session.get(VisitReason, reasons[0]["id"])
    stale.featured_at = utcnow() - timedelta(hours=49)
    db_session.commit()

    resp = admin_client.patch(f"/api/admin/visit-reasons/{reasons[3]['id']}", json={"featured": True})
    assert resp.status_code == 200


def test_public_listing_drops_featured_after_48_hours(admin_client, db_session):
    reason = _create(admin_client, "Hackathon")
    admin_client.patch(f"/api/admin/visit-reasons/{reason['id']}", json={"featured": True})

    listed = admin_client.get("/api/visit-reasons").json()
    assert listed[0]["featured"] is True

    row = db_session.get(VisitReason, reason["id"])
    row.featured_at = utcnow() - timedelta(hours=49)
    db_session.commit()

    listed = admin_client.get("/api/visit-reasons").json()
    assert listed[0]["featured"] is False

    admin_view = admin_client.get("/api/admin/visit-reasons").json()
    assert admin_view[0]["featured"] is True
    assert admin_view[0]["featured_active"] is False


def test_out_of_range_integers_are_client_errors(admin_client):
    resp = admin_client.post("/api/admin/visit-reasons", json={"label": "Huge", "sort_order": 2**70})
    assert resp.status_code == 422

    reason = _create(admin_client, "Small")
    resp = admin_client.patch(f"/api/admin/visit-reasons/{reason['id']}", json={"sort_order": -(2**40)})
    assert resp.status_code == 422
    assert admin_client.patch(f"/api/admin/visit-reasons/{2**70}", json={"active": False}).status_code == 422

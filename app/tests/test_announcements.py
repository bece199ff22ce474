from datetime import timedelta

from app.exceptions import UpstreamError
from app.models.announcement import Announcement, AnnouncementStatus
from app.models.audit_log import AuditLog
from app.models.community import AnnouncementCommunity, Community, PlatformType
from app.services.auth_service import create_access_token


def _headers(user):
    token = create_access_token(user.email, user.id, user.role.value, timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


def _community(db, name="Alpha Traders", chat_id="-1001"):
    community = Community(
        name=name,
        platform=PlatformType.TELEGRAM,
        platform_id=chat_id,
        price_per_announcement=25.0,
    )
    db.add(community)
    db.commit()
    db.refresh(community)
    return community


def _create(client, user, **overrides):
    payload = {
        "title": "New Partnership Announcement",
        "content": "We are thrilled to announce our partnership with Example Labs.",
        "cta_text": "Read more",
        "cta_url": "https://example.com/news",
    }
    payload.update(overrides)
    return client.post("/announcements/", json=payload, headers=_headers(user))


def test_create_announcement_is_draft(client, db_session, regular_user):
    community = _community(db_session)
    r = _create(client, regular_user, community_ids=[community.id])
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["status"] == "DRAFT"
    assert data["payment_status"] == "PENDING"
    assert data["user_id"] == regular_user.id

    links = db_session.query(AnnouncementCommunity).all()
    assert [link.community_id for link in links] == [community.id]
    log = db_session.query(AuditLog).filter(AuditLog.action == "announcement.create").one()
    assert log.resource_id == data["id"]


def test_create_announcement_unknown_community(client, regular_user):
    r = _create(client, regular_user, community_ids=[404])
    assert r.status_code == 404
    assert r.json()["error_type"] == "not_found"


def test_create_requires_auth(client):
    r = client.post("/announcements/", json={"title": "t", "content": "c"})
    assert r.status_code == 401


def test_list_only_own_unless_admin(client, regular_user, other_user, admin_user):
    _create(client, regular_user)
    _create(client, other_user, title="Someone else")

    mine = client.get("/announcements/", headers=_headers(regular_user)).json()
    assert len(mine) == 1
    assert mine[0]["user_id"] == regular_user.id

    everything = client.get("/announcements/", headers=_headers(admin_user)).json()
    assert len(everything) == 2

    published = client.get(
        "/announcements/",
        params={"announcement_status": "PUBLISHED"},
        headers=_headers(admin_user),
    ).json()
    assert published == []


def test_other_users_announcement_is_not_found(client, regular_user, other_user):
    announcement_id = _create(client, regular_user).json()["id"]
    headers = _headers(other_user)
    assert client.get(f"/announcements/{announcement_id}", headers=headers).status_code == 404
    assert (
        client.put(
            f"/announcements/{announcement_id}", json={"title": "hijack"}, headers=headers
        ).status_code
        == 404
    )
    assert client.delete(f"/announcements/{announcement_id}", headers=headers).status_code == 404


def test_submit_publishes_valid_announcement(client, db_session, regular_user, fake_gemini):
    fake_gemini.reply = '{"isValid": true, "score": 0.9, "issues": [], "feedback": "Looks great"}'
    announcement_id = _create(client, regular_user).json()["id"]

    r = client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["status"] == "PUBLISHED"
    assert data["validation_result"] == {
        "isValid": True,
        "score": 0.9,
        "issues": [],
        "feedback": "Looks great",
    }


def test_submit_marks_invalid_announcement(client, regular_user, fake_gemini):
    fake_gemini.reply = (
        '{"isValid": false, "score": 0.2, "issues": ["Misleading claims"], "feedback": "Tone it down"}'
    )
    announcement_id = _create(client, regular_user, content="Guaranteed 100x gains!!!").json()["id"]

    r = client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))
    assert r.status_code == 200
    assert r.json()["status"] == "VALIDATION_FAILED"
    assert r.json()["validation_result"]["issues"] == ["Misleading claims"]

    # A failed announcement can be edited and resubmitted
    r = client.put(
        f"/announcements/{announcement_id}",
        json={"content": "A calmer description of the launch."},
        headers=_headers(regular_user),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "DRAFT"
    assert r.json()["validation_result"] is None


def test_submit_stays_pending_when_validator_unavailable(
    client, db_session, regular_user, fake_gemini
):
    fake_gemini.error = UpstreamError("Gemini API error: overloaded")
    announcement_id = _create(client, regular_user).json()["id"]

    r = client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))
    assert r.status_code == 200
    assert r.json()["status"] == "PENDING_VALIDATION"

    log = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "announcement.submit")
        .one()
    )
    assert log.status == "failure"


def test_submit_twice_conflicts(client, regular_user, fake_gemini):
    fake_gemini.reply = '{"isValid": true, "score": 1}'
    announcement_id = _create(client, regular_user).json()["id"]
    client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))
    r = client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))
    assert r.status_code == 409


def test_published_announcement_is_frozen(client, db_session, regular_user, fake_gemini):
    fake_gemini.reply = '{"isValid": true, "score": 0.95}'
    announcement_id = _create(client, regular_user).json()["id"]
    client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))

    r = client.put(
        f"/announcements/{announcement_id}", json={"title": "Edited"}, headers=_headers(regular_user)
    )
    assert r.status_code == 409
    assert r.json()["error_type"] == "conflict"
    r = client.delete(f"/announcements/{announcement_id}", headers=_headers(regular_user))
    assert r.status_code == 409


def test_delete_draft(client, db_session, regular_user):
    community = _community(db_session)
    announcement_id = _create(client, regular_user, community_ids=[community.id]).json()["id"]
    r = client.delete(f"/announcements/{announcement_id}", headers=_headers(regular_user))
    assert r.status_code == 204
    db_session.expire_all()
    assert db_session.query(Announcement).count() == 0
    assert db_session.query(AnnouncementCommunity).count() == 0


def test_admin_review(client, db_session, regular_user, admin_user, fake_gemini):
    fake_gemini.error = UpstreamError("unavailable")
    first = _create(client, regular_user).json()["id"]
    second = _create(client, regular_user, title="Second announcement").json()["id"]
    for announcement_id in (first, second):
        client.post(f"/announcements/{announcement_id}/submit", headers=_headers(regular_user))

    r = client.post(f"/announcements/{first}/approve", headers=_headers(regular_user))
    assert r.status_code == 403

    r = client.post(f"/announcements/{first}/approve", headers=_headers(admin_user))
    assert r.status_code == 200
    assert r.json()["status"] == "PUBLISHED"

    r = client.post(f"/announcements/{second}/reject", headers=_headers(admin_user))
    assert r.status_code == 200
    assert r.json()["status"] == "VALIDATION_FAILED"

    # Already reviewed
    r = client.post(f"/announcements/{first}/reject", headers=_headers(admin_user))
    assert r.status_code == 409

    db_session.expire_all()
    assert (
        db_session.query(Announcement).filter(Announcement.id == first).one().status
        == AnnouncementStatus.PUBLISHED
    )


def test_update_rejects_null_required_fields(client, db_session, regular_user):
    announcement_id = _create(client, regular_user).json()["id"]
    for field in ("title", "content"):
        r = client.put(
            f"/announcements/{announcement_id}",
            json={field: None},
            headers=_headers(regular_user),
        )
        assert r.status_code == 400, field
        assert r.json()["success"] is False
        assert r.json()["error_type"] == "invalid_input"

    # Optional columns can still be cleared
    r = client.put(
        f"/announcements/{announcement_id}", json={"cta_text": None}, headers=_headers(regular_user)
    )
    assert r.status_code == 200
    assert r.json()["cta_text"] is None
    assert r.json()["title"] == "New Partnership Announcement"

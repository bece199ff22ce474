from datetime import timedelta

import pytest
import stripe

from app.models.announcement import Announcement, AnnouncementStatus, PaymentStatus
from app.models.community import AnnouncementCommunity, Community, PlatformType
from app.models.platform_settings import PlatformSettings
from app.services.auth_service import create_access_token


def _headers(user):
    token = create_access_token(user.email, user.id, user.role.value, timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def priced_announcement(db_session, regular_user):
    db_session.add(PlatformSettings(platform_fee=5.0))
    first = Community(name="A", platform=PlatformType.TELEGRAM, platform_id="-1", price_per_announcement=10.0)
    second = Community(name="B", platform=PlatformType.TELEGRAM, platform_id="-2", price_per_announcement=2.5)
    db_session.add_all([first, second])
    db_session.commit()
    announcement = Announcement(
        title="Token sale",
        content="Public round opens next week.",
        status=AnnouncementStatus.DRAFT,
        user_id=regular_user.id,
    )
    announcement.communities = [
        AnnouncementCommunity(community_id=first.id),
        AnnouncementCommunity(community_id=second.id),
    ]
    db_session.add(announcement)
    db_session.commit()
    db_session.refresh(announcement)
    return announcement


def test_checkout_creates_session(client, regular_user, priced_announcement, monkeypatch):
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return {"id": "cs_test_123", "url": "https://checkout.stripe.com/pay/cs_test_123"}

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    r = client.post(
        "/payments/checkout",
        json={"announcement_id": priced_announcement.id},
        headers=_headers(regular_user),
    )
    assert r.status_code == 200, r.text
    assert r.json() == {
        "id": "cs_test_123",
        "url": "https://checkout.stripe.com/pay/cs_test_123",
        "amount": 17.5,
    }
    assert captured["line_items"][0]["price_data"]["unit_amount"] == 1750
    assert captured["metadata"]["announcement_id"] == priced_announcement.id


def test_checkout_for_other_users_announcement(client, other_user, priced_announcement):
    r = client.post(
        "/payments/checkout",
        json={"announcement_id": priced_announcement.id},
        headers=_headers(other_user),
    )
    assert r.status_code == 404


def test_checkout_provider_error(client, regular_user, priced_announcement, monkeypatch):
    def fake_create(**kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    r = client.post(
        "/payments/checkout",
        json={"announcement_id": priced_announcement.id},
        headers=_headers(regular_user),
    )
    assert r.status_code == 500
    assert r.json()["error_type"] == "upstream_error"


def _event(event_type, announcement_id):
    return {
        "type": event_type,
        "data": {"object": {"metadata": {"announcement_id": str(announcement_id)}}},
    }


def test_webhook_marks_paid(client, db_session, priced_announcement, monkeypatch):
    monkeypatch.setattr(
        stripe.Webhook,
        "construct_event",
        lambda payload, sig_header, secret: _event("checkout.session.completed", priced_announcement.id),
    )
    r = client.post("/payments/webhook", content=b"{}", headers={"stripe-signature": "t=1,v1=x"})
    assert r.status_code == 200
    db_session.expire_all()
    paid = db_session.query(Announcement).filter(Announcement.id == priced_announcement.id).one()
    assert paid.payment_status == PaymentStatus.PAID


def test_webhook_bad_signature(client, monkeypatch):
    def reject(payload, sig_header, secret):
        raise stripe.SignatureVerificationError("bad signature", sig_header)

    monkeypatch.setattr(stripe.Webhook, "construct_event", reject)
    r = client.post("/payments/webhook", content=b"{}", headers={"stripe-signature": "nope"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid signature"

import logging

import stripe
from fastapi import Request
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConfigError, InvalidInputError, NotFoundError, UpstreamError
from app.models.announcement import Announcement, PaymentStatus
from app.models.community import AnnouncementCommunity, Community
from app.schemas.payment import CheckoutCreate
from app.services.platform_settings import PlatformSettingsService

logger = logging.getLogger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY


class StripeCheckoutService:
    def __init__(self, db: Session):
        self.db = db

    def announcement_price(self, announcement: Announcement) -> float:
        """Sum of the target communities' prices plus the platform fee."""
        community_total = sum(
            community.price_per_announcement or 0.0
            for community in (
                self.db.query(Community)
                .join(AnnouncementCommunity, AnnouncementCommunity.community_id == Community.id)
                .filter(AnnouncementCommunity.announcement_id == announcement.id)
                .all()
            )
        )
        return round(community_total + PlatformSettingsService(self.db).get().platform_fee, 2)

    def create_checkout_session(self, user: dict, request: CheckoutCreate) -> dict:
        announcement = (
            self.db.query(Announcement)
            .filter(
                Announcement.id == request.announcement_id,
                Announcement.user_id == user.get("id"),
            )
            .first()
        )
        if not announcement:
            raise NotFoundError("Announcement not found")
        if announcement.payment_status == PaymentStatus.PAID:
            raise InvalidInputError("Announcement is already paid")

        amount = self.announcement_price(announcement)
        if amount <= 0:
            raise InvalidInputError("Announcement has nothing to pay for")

        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                mode="payment",
                line_items=[
                    {
                        "price_data": {
                            "currency": "usd",
                            "unit_amount": int(round(amount * 100)),  # cents
                            "product_data": {"name": f"Announcement: {announcement.title}"},
                        },
                        "quantity": 1,
                    },
                ],
                metadata={
                    "user_id": user.get("id"),
                    "announcement_id": announcement.id,
                },
                success_url=settings.STRIPE_SUCCESS_URL,
                cancel_url=settings.STRIPE_CANCEL_URL,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed: {e}", exc_info=True)
            raise UpstreamError(f"Payment provider error: {e}") from e

        return {"id": session["id"], "url": session.get("url"), "amount": amount}

    def _set_payment_status(self, session: dict, payment_status: PaymentStatus) -> dict:
        announcement_id = (session.get("metadata") or {}).get("announcement_id")
        if not announcement_id:
            raise InvalidInputError("Missing metadata: announcement_id")
        announcement = (
            self.db.query(Announcement)
            .filter(Announcement.id == int(announcement_id))
            .first()
        )
        if not announcement:
            raise NotFoundError("Announcement not found")
        announcement.payment_status = payment_status
        self.db.commit()
        return {"status": "success"}

    async def handle_webhook(self, request: Request) -> dict:
        payload = await request.body()
        sig_header = request.headers.get("stripe-signature")
        endpoint_secret = settings.STRIPE_WEBHOOK_SECRET

        if not endpoint_secret:
            raise ConfigError("Stripe webhook secret missing")

        try:
            event = stripe.Webhook.construct_event(
                payload=payload,
                sig_header=sig_header,
                secret=endpoint_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise InvalidInputError("Invalid signature") from e

        if event["type"] == "checkout.session.completed":
            return self._set_payment_status(event["data"]["object"], PaymentStatus.PAID)
        elif event["type"] == "checkout.session.expired":
            return self._set_payment_status(event["data"]["object"], PaymentStatus.FAILED)

        return {"status": "ignored"}

from typing import Annotated
from fastapi import APIRouter, Depends, Response, status, Request

from app.dependencies import Permission, db_dependency, require_permission
from app.schemas.payment import CheckoutCreate, CheckoutResponse
from app.services.stripe_checkout import StripeCheckoutService
from app.services.audit_log_service import AuditLogService

router = APIRouter(prefix="/payments", tags=["payments"])

user_dependency = Annotated[
    dict, Depends(require_permission(Permission.CREATE_ANNOUNCEMENTS))
]


@router.post("/checkout", status_code=status.HTTP_200_OK, response_model=CheckoutResponse)
def create_checkout_session(
    db: db_dependency, user: user_dependency, body: CheckoutCreate, request: Request
):
    result = StripeCheckoutService(db).create_checkout_session(user, body)
    # Never log card or session secrets, only that checkout started
    AuditLogService().create_log(
        db=db,
        action="announcement.checkout_initiated",
        resource_type="announcement",
        resource_id=body.announcement_id,
        user_id=user.get("id"),
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return result


@router.post("/webhook", status_code=status.HTTP_200_OK)
async def webhook(request: Request, db: db_dependency):
    await StripeCheckoutService(db).handle_webhook(request=request)
    return Response(status_code=status.HTTP_200_OK)

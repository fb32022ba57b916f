from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.exceptions import ValidationError
from app.database import get_db
from app.schemas.billing import (
    BulkVideoCheckoutRequest,
    CheckSubscriptionRequest,
    CheckoutRequest,
    PortalSessionRequest,
    SubscriptionCheckoutRequest,
    VerifySubscriptionRequest,
    VideoCheckoutRequest,
)
from app.services.billing import BillingService
from app.services.user_store import UserStore

router = APIRouter()


def _origin(request: Request) -> str:
    return request.headers.get("origin") or get_settings().app_url


def _base_url(request: Request) -> str:
    proto = request.headers.get("x-forwarded-proto") or "https"
    host = request.headers.get("host") or request.url.netloc
    return f"{proto}://{host}"


def _checkout(request: Request, payload: CheckoutRequest) -> dict:
    session = BillingService().create_plan_checkout(
        payload.plan,
        payload.billing_cycle or "monthly",
        payload.email,
        _base_url(request),
    )
    return {"success": True, "checkoutUrl": session.url, "sessionId": session.id}


@router.get("/create-checkout")
def create_checkout_redirect(
    request: Request,
    plan: Optional[str] = None,
    billingCycle: Optional[str] = None,
    email: Optional[str] = None,
):
    result = _checkout(request, CheckoutRequest(plan=plan, billing_cycle=billingCycle, email=email))
    if "application/json" in request.headers.get("content-type", ""):
        return result
    return RedirectResponse(result["checkoutUrl"], status_code=status.HTTP_303_SEE_OTHER)


@router.post("/create-checkout")
def create_checkout(request: Request, payload: CheckoutRequest) -> dict:
    return _checkout(request, payload)


@router.post("/create-subscription-checkout")
def create_subscription_checkout(request: Request, payload: SubscriptionCheckoutRequest) -> dict:
    return BillingService().create_subscription_checkout(
        payload.plan, payload.customer_email, _origin(request)
    )


@router.post("/create-video-checkout")
def create_video_checkout(request: Request, payload: VideoCheckoutRequest) -> dict:
    return BillingService().create_video_checkout(
        payload.video_type,
        payload.customer_email,
        payload.product_name,
        payload.product_description,
        _origin(request),
    )


@router.post("/create-bulk-video-checkout")
def create_bulk_video_checkout(request: Request, payload: BulkVideoCheckoutRequest) -> dict:
    return BillingService().create_bulk_video_checkout(
        payload.products, payload.customer_email, _origin(request)
    )


@router.post("/check-subscription")
def check_subscription(payload: CheckSubscriptionRequest) -> dict:
    if not payload.email:
        raise ValidationError("Email is required")
    return BillingService().check_subscription(payload.email)


@router.post("/create-portal-session")
def create_portal_session(payload: PortalSessionRequest) -> dict:
    return BillingService().create_portal_session(payload.customer_id, payload.email)


@router.post("/verify-subscription")
def verify_subscription(payload: VerifySubscriptionRequest) -> dict:
    return BillingService().verify_subscription(payload.session_id, payload.customer_id)


@router.post("/stripe-webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)) -> dict:
    service = BillingService()
    event = service.construct_event(await request.body(), request.headers.get("stripe-signature"))
    service.handle_event(event, UserStore(db))
    return {"received": True}

from __future__ import annotations

from typing import Any, Optional

from app.schemas.common import CamelModel


class CheckoutRequest(CamelModel):
    plan: Optional[str] = None
    billing_cycle: Optional[str] = None
    email: Optional[str] = None


class SubscriptionCheckoutRequest(CamelModel):
    plan: Optional[str] = None
    customer_email: Optional[str] = None


class VideoCheckoutRequest(CamelModel):
    video_type: Optional[str] = None
    customer_email: Optional[str] = None
    product_name: Optional[str] = None
    product_description: Optional[str] = None


class BulkVideoCheckoutRequest(CamelModel):
    # Left untyped so a non-list reaches the handler and gets the API's own 400.
    products: Any = None
    customer_email: Optional[str] = None


class CheckSubscriptionRequest(CamelModel):
    email: Optional[str] = None


class PortalSessionRequest(CamelModel):
    customer_id: Optional[str] = None
    email: Optional[str] = None


class VerifySubscriptionRequest(CamelModel):
    session_id: Optional[str] = None
    customer_id: Optional[str] = None

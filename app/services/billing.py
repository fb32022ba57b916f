"""
Stripe billing: checkout sessions, subscription lookup, portal and webhooks.

The Stripe SDK is synchronous; routes that use this service are plain ``def``
handlers so FastAPI runs them in its threadpool.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import stripe

from app.config import Settings, get_settings
from app.core.exceptions import (
    ConfigurationError,
    IntegrationError,
    NotFoundError,
    ValidationError,
)
from app.services.catalog import PLAN_FEATURES
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

CHECKOUT_PLANS = ("starter", "professional", "enterprise")
TRIAL_DAYS = 7
MAX_BULK_VIDEOS = 10
SALES_EMAIL = "sales@productdescriptions.io"

SUBSCRIPTION_PLAN_DETAILS = {
    "starter": {"name": "Starter Plan", "description": "100 products/month"},
    "professional": {"name": "Professional Plan", "description": "500 products/month + 5 videos"},
}

HANDLED_EVENTS = {
    "checkout.session.completed": "Checkout completed",
    "customer.subscription.created": "Subscription created",
    "customer.subscription.updated": "Subscription updated",
    "customer.subscription.deleted": "Subscription canceled",
    "invoice.payment_succeeded": "Payment succeeded for invoice",
    "invoice.payment_failed": "Payment failed for invoice",
}


def _field(obj: Any, key: str) -> Any:
    try:
        return obj[key]
    except (KeyError, TypeError):
        return getattr(obj, key, None)


class BillingService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def configured(self) -> bool:
        return bool(self.settings.stripe_key)

    @property
    def api_key(self) -> str:
        key = self.settings.stripe_key
        if not key:
            logger.error("STRIPE_SECRET_KEY is not configured")
            raise ConfigurationError(
                "Payment system not configured", {"message": "Stripe API key is missing"}
            )
        return key

    # -- prices ------------------------------------------------------------

    def plan_prices(self) -> Dict[str, Dict[str, Optional[str]]]:
        s = self.settings
        return {
            "starter": {"monthly": s.stripe_price_starter, "annual": s.stripe_price_starter_annual},
            "professional": {
                "monthly": s.stripe_price_professional,
                "annual": s.stripe_price_professional_annual,
            },
            "enterprise": {
                "monthly": s.stripe_price_enterprise,
                "annual": s.stripe_price_enterprise_annual,
            },
        }

    def price_for(self, plan: str, billing_cycle: str = "monthly") -> Optional[str]:
        prices = self.plan_prices().get(plan) or {}
        return prices.get(billing_cycle) or prices.get("monthly")

    def subscription_prices(self) -> Dict[str, str]:
        s = self.settings
        return {
            "starter": s.stripe_price_starter or "price_starter_test",
            "professional": s.stripe_price_professional or "price_professional_test",
            "enterprise": s.stripe_price_enterprise or "price_enterprise_test",
        }

    def plan_for_price(self, price_id: Optional[str]) -> str:
        for plan, prices in self.plan_prices().items():
            if price_id and price_id in prices.values():
                return plan
        return "free"

    # -- customers ---------------------------------------------------------

    def find_customer(self, email: str) -> Any:
        customers = stripe.Customer.list(email=email, limit=1, api_key=self.api_key)
        data = _field(customers, "data") or []
        return data[0] if data else None

    def find_or_create_customer(self, email: str, metadata: Dict[str, str]) -> str:
        existing = self.find_customer(email)
        if existing is not None:
            return _field(existing, "id")
        customer = stripe.Customer.create(email=email, metadata=metadata, api_key=self.api_key)
        logger.info("Created Stripe customer %s", _field(customer, "id"))
        return _field(customer, "id")

    # -- checkout ----------------------------------------------------------

    def create_plan_checkout(
        self,
        plan: Optional[str],
        billing_cycle: str,
        email: Optional[str],
        base_url: str,
    ) -> Any:
        if not plan or plan not in CHECKOUT_PLANS:
            raise ValidationError(
                "Invalid plan selected",
                {"details": "Plan must be starter, professional, or enterprise"},
            )
        price_id = self.price_for(plan, billing_cycle)
        if not price_id:
            raise ValidationError(
                "Price not configured",
                {"details": f"Price ID for {plan} ({billing_cycle}) is not configured"},
            )
        api_key = self.api_key
        metadata = {"plan": plan, "billingCycle": billing_cycle}

        try:
            customer_id = self.find_or_create_customer(email, metadata) if email else None
            params: Dict[str, Any] = {
                "payment_method_types": ["card"],
                "line_items": [{"price": price_id, "quantity": 1}],
                "mode": "subscription",
                "success_url": f"{base_url}/dashboard.html?session_id={{CHECKOUT_SESSION_ID}}&plan={plan}",
                "cancel_url": f"{base_url}/pricing.html",
                "allow_promotion_codes": True,
                "billing_address_collection": "auto",
                "metadata": metadata,
            }
            if customer_id:
                params["customer"] = customer_id
            elif email:
                params["customer_email"] = email
            if plan == "starter":
                params["subscription_data"] = {"trial_period_days": TRIAL_DAYS, "metadata": metadata}
            return stripe.checkout.Session.create(api_key=api_key, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe checkout failed: %s", exc)
            raise IntegrationError("Failed to create checkout session", {"details": str(exc)})

    def create_subscription_checkout(
        self, plan: Optional[str], customer_email: Optional[str], origin: str
    ) -> Dict[str, Any]:
        api_key = self.api_key
        prices = self.subscription_prices()
        if not plan or plan not in prices:
            raise ValidationError("Invalid subscription plan", {"message": "Please select a valid plan"})
        if plan == "enterprise":
            return {
                "contactSales": True,
                "message": "Please contact sales for enterprise pricing",
                "email": SALES_EMAIL,
            }

        details = SUBSCRIPTION_PLAN_DETAILS[plan]
        logger.info("Creating subscription checkout for plan=%s", plan)
        try:
            session = stripe.checkout.Session.create(
                api_key=api_key,
                payment_method_types=["card"],
                line_items=[{"price": prices[plan], "quantity": 1}],
                mode="subscription",
                success_url=f"{origin}/subscription-success.html?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/bulk.html",
                customer_email=customer_email,
                metadata={
                    "plan": plan,
                    "planName": details["name"],
                    "planDescription": details["description"],
                },
                subscription_data={"trial_period_days": TRIAL_DAYS, "metadata": {"plan": plan}},
            )
        except stripe.StripeError as exc:
            logger.error("Subscription checkout error: %s", exc)
            raise IntegrationError(
                "Failed to create subscription checkout",
                {"message": str(exc), "type": type(exc).__name__},
            )
        return {"sessionId": _field(session, "id"), "url": _field(session, "url")}

    def create_video_checkout(
        self,
        video_type: Optional[str],
        customer_email: Optional[str],
        product_name: Optional[str],
        product_description: Optional[str],
        origin: str,
    ) -> Dict[str, Any]:
        api_key = self.api_key
        if video_type == "triple":
            price_id, package_name = self.settings.stripe_price_video_triple, "Triple Video Pack"
        else:
            price_id, package_name = self.settings.stripe_price_video_single, "Single AI Video"

        logger.info("Creating video checkout for %s (%s)", package_name, price_id)
        try:
            session = stripe.checkout.Session.create(
                api_key=api_key,
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                mode="payment",
                success_url=f"{origin}/video-success.html?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/app.html",
                customer_email=customer_email,
                metadata={
                    "videoType": video_type or "",
                    "packageName": package_name,
                    "productName": product_name or "Product",
                    "productDescription": product_description or "",
                },
            )
        except stripe.AuthenticationError as exc:
            logger.error("Stripe rejected the API key: %s", exc)
            raise IntegrationError(
                "Authentication with payment provider failed",
                {"message": "Invalid API key configuration"},
            )
        except stripe.InvalidRequestError as exc:
            logger.error("Invalid Stripe request: %s", exc)
            raise ValidationError(
                "Invalid request to payment provider",
                {"message": str(exc), "details": "Check if price IDs are correct"},
            )
        except stripe.StripeError as exc:
            logger.error("Checkout session error: %s", exc)
            raise IntegrationError(
                "Failed to create checkout session",
                {"message": str(exc), "type": type(exc).__name__},
            )
        return {"sessionId": _field(session, "id"), "url": _field(session, "url")}

    def create_bulk_video_checkout(
        self, products: Any, customer_email: Optional[str], origin: str
    ) -> Dict[str, Any]:
        api_key = self.api_key
        if not isinstance(products, list):
            raise ValidationError(
                "Invalid products data", {"message": "Please provide an array of products"}
            )

        video_count = min(len(products), MAX_BULK_VIDEOS)
        product_ids = [
            str(_product_label(product)) for product in products[:MAX_BULK_VIDEOS]
        ]
        logger.info("Creating bulk video checkout for %d products", len(products))
        try:
            session = stripe.checkout.Session.create(
                api_key=api_key,
                payment_method_types=["card"],
                line_items=[{"price": self.settings.stripe_price_bulk_video, "quantity": 1}],
                mode="payment",
                success_url=f"{origin}/bulk-video-success.html?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/bulk.html",
                customer_email=customer_email,
                metadata={
                    "type": "bulk_video",
                    "videoCount": str(video_count),
                    "productIds": ",".join(product_ids),
                },
            )
        except stripe.StripeError as exc:
            logger.error("Bulk video checkout error: %s", exc)
            raise IntegrationError(
                "Failed to create bulk video checkout",
                {"message": str(exc), "type": type(exc).__name__},
            )
        return {
            "sessionId": _field(session, "id"),
            "url": _field(session, "url"),
            "videoCount": video_count,
            "totalPrice": 199,
        }

    # -- subscriptions -----------------------------------------------------

    def check_subscription(self, email: str) -> Dict[str, Any]:
        api_key = self.api_key
        free = {"hasSubscription": False, "plan": "free", "features": PLAN_FEATURES["free"]}
        try:
            customer = self.find_customer(email)
            if customer is None:
                return free
            subscriptions = stripe.Subscription.list(
                customer=_field(customer, "id"), status="active", limit=1, api_key=api_key
            )
        except stripe.StripeError as exc:
            logger.error("Error checking subscription: %s", exc)
            raise IntegrationError("Failed to check subscription status", {"message": str(exc)})

        data = _field(subscriptions, "data") or []
        if not data:
            return free

        subscription = data[0]
        items = _field(_field(subscription, "items"), "data") or []
        item = items[0] if items else {}
        price_id = _field(_field(item, "price"), "id")
        plan = self.plan_for_price(price_id)
        period_end = _field(subscription, "current_period_end") or _field(item, "current_period_end")
        return {
            "hasSubscription": True,
            "plan": plan,
            "features": PLAN_FEATURES[plan],
            "customerId": _field(customer, "id"),
            "subscriptionId": _field(subscription, "id"),
            "currentPeriodEnd": _period_end_iso(period_end),
        }

    def subscription_plan(self, email: str) -> str:
        """Plan name for login responses; any failure degrades to ``free``."""
        if not self.configured:
            return "free"
        try:
            return self.check_subscription(email)["plan"]
        except Exception as exc:
            logger.warning("Subscription lookup failed for login, defaulting to free: %s", exc)
            return "free"

    def create_portal_session(self, customer_id: Optional[str], email: Optional[str]) -> Dict[str, str]:
        if not customer_id and not email:
            raise ValidationError("Customer ID or email is required")
        api_key = self.api_key
        try:
            customer = customer_id
            if not customer:
                found = self.find_customer(email)
                if found is None:
                    raise NotFoundError("No subscription found for this email")
                customer = _field(found, "id")

            session = stripe.billing_portal.Session.create(
                customer=customer,
                return_url=f"{self.settings.app_url}/app.html",
                api_key=api_key,
            )
        except stripe.StripeError as exc:
            logger.error("Error creating portal session: %s", exc)
            raise IntegrationError("Failed to create portal session", {"message": str(exc)})
        return {"url": _field(session, "url")}

    # -- webhooks ----------------------------------------------------------

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Any:
        secret = self.settings.stripe_webhook_secret
        if secret is None or not secret.get_secret_value():
            raise ValidationError("Webhook Error: webhook secret is not configured")
        try:
            return stripe.Webhook.construct_event(payload, signature or "", secret.get_secret_value())
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.error("Webhook signature verification failed: %s", exc)
            raise ValidationError(f"Webhook Error: {exc}")

    def handle_event(self, event: Any, store: Optional[UserStore] = None) -> None:
        event_type = _field(event, "type")
        obj = _field(_field(event, "data"), "object")
        label = HANDLED_EVENTS.get(event_type)
        if label is None:
            logger.info("Unhandled event type %s", event_type)
            return
        logger.info("%s: %s", label, _field(obj, "id"))
        if event_type == "checkout.session.completed" and store is not None:
            self._link_customer(obj, store)

    @staticmethod
    def _link_customer(session: Any, store: UserStore) -> None:
        """Remember the Stripe customer on the account that paid."""
        customer_id = _field(session, "customer")
        email = _field(session, "customer_email") or _field(_field(session, "customer_details"), "email")
        if not customer_id or not email:
            return
        user = store.get_user_by_email(email)
        if user is None:
            logger.info("Checkout %s has no matching account for its email", _field(session, "id"))
            return
        store.update_user(user.id, stripe_customer_id=customer_id)
        logger.info("Linked Stripe customer %s to user %s", customer_id, user.id)

    # -- verification ------------------------------------------------------

    def verify_subscription(self, session_id: Optional[str], customer_id: Optional[str]) -> Dict[str, Any]:
        """Confirm an active subscription from a checkout session or a customer id."""
        api_key = self.api_key
        try:
            customer = None
            if session_id:
                session = stripe.checkout.Session.retrieve(session_id, api_key=api_key)
                if _field(session, "payment_status") == "paid":
                    customer = stripe.Customer.retrieve(_field(session, "customer"), api_key=api_key)
            elif customer_id:
                customer = stripe.Customer.retrieve(customer_id, api_key=api_key)

            subscription = None
            if customer is not None:
                subscriptions = stripe.Subscription.list(
                    customer=_field(customer, "id"), status="active", limit=1, api_key=api_key
                )
                data = _field(subscriptions, "data") or []
                subscription = data[0] if data else None
        except stripe.StripeError as exc:
            logger.error("Subscription verification error: %s", exc)
            raise IntegrationError("Failed to verify subscription", {"message": str(exc)})

        if subscription is None:
            return {"active": False, "message": "No active subscription found"}
        return {
            "active": True,
            "customerId": _field(customer, "id"),
            "customerEmail": _field(customer, "email"),
            "subscriptionId": _field(subscription, "id"),
            "currentPeriodEnd": _field(subscription, "current_period_end"),
            "cancelAtPeriodEnd": bool(_field(subscription, "cancel_at_period_end")),
            "status": _field(subscription, "status"),
        }


def _product_label(product: Any) -> Any:
    if isinstance(product, dict):
        return product.get("product_name") or product.get("id") or ""
    return product


def _period_end_iso(timestamp: Any) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).isoformat()

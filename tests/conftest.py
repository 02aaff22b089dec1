import pytest

from app import create_app
from config import Settings
from db.models import Order, OrderNotFound, StoreError
from payments.mercadopago import ProviderResult


class FakeProvider:
    def __init__(self):
        self.preference_result = ProviderResult(ok=True, status=201, data={
            "id": "pref-123",
            "init_point": "https://www.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-123",
            "sandbox_init_point": "https://sandbox.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-123",
        })
        self.payments = {}
        self.preferences_sent = []
        self.payments_fetched = []

    def create_preference(self, payload):
        self.preferences_sent.append(payload)
        return self.preference_result

    def get_payment(self, payment_id):
        self.payments_fetched.append(payment_id)
        if payment_id not in self.payments:
            return ProviderResult(ok=False, status=404, data={"message": "Payment not found"})
        return ProviderResult(ok=True, status=200, data=self.payments[payment_id])


class FakeStore:
    def __init__(self):
        self.orders = {}
        self.updates = []
        self.fail_updates = False

    def get_order(self, order_id):
        if order_id not in self.orders:
            raise OrderNotFound("JSON object requested, multiple (or no) rows returned")
        return self.orders[order_id]

    def update_payment(self, order_id, payment_provider, payment_status, status):
        if self.fail_updates:
            raise StoreError("connection refused")
        self.updates.append((order_id, payment_provider, payment_status, status))
        order = self.orders.get(order_id)
        if order:
            order.payment_status = payment_status
            order.status = status


def make_order(order_id="3f2b9c1e-0000-4000-8000-000000000001", **kw):
    fields = dict(
        id=order_id, status="novo", payment_status="pending", store_id="loja-1",
        created_at="2024-05-01T12:00:00+00:00", total_cents=4590, pay_on_delivery=False,
        cash_change_cents=None,
    )
    fields.update(kw)
    return Order(**fields)


@pytest.fixture
def settings():
    return Settings(
        mp_access_token="TEST-token",
        supabase_url="https://proj.supabase.co",
        service_role_key="service-key",
    )


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(settings, provider, store):
    app = create_app(settings, provider=provider, store=store)
    return app.test_client()

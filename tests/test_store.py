import pytest
import requests

from config import ConfigError, Settings
from db import get_order_store, init_db
from db.models import OrderNotFound, SqlOrderStore, StoreError
from db.supabase import SupabaseOrderStore

from test_mercadopago import FakeResponse


# ---------------- SQL (sqlite) ----------------

@pytest.fixture
def sql_store(tmp_path):
    url = f"sqlite:///{tmp_path / 'pedidos.db'}"
    init_db(url)
    return SqlOrderStore(url)


def test_sql_get_and_update(sql_store):
    sql_store.create_order("o-1", total_cents=4590, store_id="loja-1", pay_on_delivery=True, cash_change_cents=5000)
    order = sql_store.get_order("o-1")
    assert order.total_cents == 4590
    assert order.status == "novo"
    assert order.payment_status == "pending"
    assert order.pay_on_delivery is True
    assert order.cash_change_cents == 5000
    assert order.created_at

    sql_store.update_payment("o-1", payment_provider="mercadopago", payment_status="paid", status="preparando")
    order = sql_store.get_order("o-1")
    assert (order.payment_status, order.status) == ("paid", "preparando")


def test_sql_null_status_is_kept_null(sql_store):
    sql_store.create_order("o-2", total_cents=100, status=None, payment_status=None)
    order = sql_store.get_order("o-2")
    assert order.status is None
    assert order.payment_status is None
    assert order.pay_on_delivery is False


def test_sql_not_found(sql_store):
    with pytest.raises(OrderNotFound):
        sql_store.get_order("missing")


def test_sql_update_unknown_order_is_noop(sql_store):
    sql_store.update_payment("missing", "mercadopago", "paid", "preparando")


def test_sql_without_table_raises_store_error(tmp_path):
    store = SqlOrderStore(f"sqlite:///{tmp_path / 'vazio.db'}")
    with pytest.raises(StoreError):
        store.get_order("x")


# ---------------- Supabase (PostgREST) ----------------

class FakeRestSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def _do(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.exc:
            raise self.exc
        return self.response

    def get(self, url, **kwargs):
        return self._do("GET", url, **kwargs)

    def patch(self, url, **kwargs):
        return self._do("PATCH", url, **kwargs)


ROW = {
    "id": "o-1", "status": None, "payment_status": "paid", "store_id": "loja-1",
    "created_at": "2024-05-01T12:00:00+00:00", "total_cents": 1000,
    "pay_on_delivery": False, "cash_change_cents": None,
}


def test_supabase_get_order():
    session = FakeRestSession(FakeResponse(200, ROW))
    store = SupabaseOrderStore("https://proj.supabase.co/", "KEY", session=session)
    order = store.get_order("o-1")
    assert order.id == "o-1"
    assert order.payment_status == "paid"
    method, url, kwargs = session.calls[0]
    assert url == "https://proj.supabase.co/rest/v1/orders"
    assert kwargs["params"]["id"] == "eq.o-1"
    assert "cash_change_cents" in kwargs["params"]["select"]
    assert kwargs["headers"]["apikey"] == "KEY"
    assert kwargs["headers"]["Authorization"] == "Bearer KEY"
    assert kwargs["headers"]["Accept"] == "application/vnd.pgrst.object+json"


def test_supabase_not_found():
    msg = {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"}
    store = SupabaseOrderStore("https://p", "K", session=FakeRestSession(FakeResponse(406, msg)))
    with pytest.raises(OrderNotFound) as exc:
        store.get_order("x")
    assert "no) rows" in str(exc.value)


def test_supabase_update():
    session = FakeRestSession(FakeResponse(204))
    store = SupabaseOrderStore("https://p", "K", session=session)
    store.update_payment("o-1", "mercadopago", "refunded", "cancelado")
    method, url, kwargs = session.calls[0]
    assert method == "PATCH"
    assert kwargs["params"] == {"id": "eq.o-1"}
    assert kwargs["json"] == {"payment_provider": "mercadopago", "payment_status": "refunded", "status": "cancelado"}
    assert kwargs["headers"]["Prefer"] == "return=minimal"


def test_supabase_update_error():
    session = FakeRestSession(FakeResponse(400, {"message": "invalid input syntax for type uuid"}))
    with pytest.raises(StoreError) as exc:
        SupabaseOrderStore("https://p", "K", session=session).update_payment("bad", "mercadopago", "paid", "preparando")
    assert "uuid" in str(exc.value)


def test_supabase_network_error():
    session = FakeRestSession(exc=requests.Timeout("timed out"))
    with pytest.raises(StoreError):
        SupabaseOrderStore("https://p", "K", session=session).get_order("o-1")


# ---------------- seleção do backend ----------------

def test_get_order_store_selection(tmp_path):
    assert isinstance(get_order_store(Settings(supabase_url="https://p", service_role_key="k")), SupabaseOrderStore)
    sql = get_order_store(Settings(order_store="sql", database_url=f"sqlite:///{tmp_path / 'a.db'}"))
    assert isinstance(sql, SqlOrderStore)
    with pytest.raises(ConfigError, match="SERVICE_ROLE_KEY"):
        get_order_store(Settings(supabase_url="https://p"))

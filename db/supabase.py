# db/supabase.py
from typing import Any, Dict, Optional

import requests

from .models import ORDER_COLUMNS, Order, OrderNotFound, StoreError


class SupabaseOrderStore:
    """
    Pedidos via PostgREST do Supabase, autenticado com a service role key
    (ignora RLS). Somente leitura e update parcial; nunca cria/apaga pedidos.
    """

    def __init__(self, url: str, service_role_key: str, timeout_s: float = 15.0,
                 session: Optional[requests.Session] = None):
        self.rest_url = f"{url.rstrip('/')}/rest/v1/orders"
        self.service_role_key = service_role_key
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }
        headers.update(extra)
        return headers

    @staticmethod
    def _error_message(resp: Any) -> str:
        try:
            data = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}"
        if isinstance(data, dict):
            return data.get("message") or data.get("details") or str(data)
        return str(data)

    def get_order(self, order_id: str) -> Order:
        try:
            resp = self.session.get(
                self.rest_url,
                params={"id": f"eq.{order_id}", "select": ORDER_COLUMNS.replace(" ", "")},
                # object+json: PostgREST devolve 406 se vier 0 ou >1 linhas
                headers=self._headers(Accept="application/vnd.pgrst.object+json"),
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise StoreError(str(e)) from e
        if resp.status_code == 406:
            raise OrderNotFound(self._error_message(resp))
        if not resp.ok:
            raise StoreError(self._error_message(resp))
        return Order.from_row(resp.json())

    def update_payment(self, order_id: str, payment_provider: str, payment_status: str, status: str) -> None:
        try:
            resp = self.session.patch(
                self.rest_url,
                params={"id": f"eq.{order_id}"},
                json={
                    "payment_provider": payment_provider,
                    "payment_status": payment_status,
                    "status": status,
                },
                headers=self._headers(Prefer="return=minimal"),
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise StoreError(str(e)) from e
        if not resp.ok:
            raise StoreError(self._error_message(resp))

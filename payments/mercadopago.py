# payments/mercadopago.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

log = logging.getLogger(__name__)


@dataclass
class ProviderResult:
    ok: bool
    status: Optional[int]
    data: Dict[str, Any] = field(default_factory=dict)


class MercadoPagoProvider:
    """
    Cliente HTTP mínimo do Mercado Pago.
    - Nunca levanta exceção de rede para o chamador: devolve ProviderResult(ok=False, ...).
    - Não faz retentativas; quem re-tenta é o MP (webhook) ou o cliente (checkout).
    """

    name = "mercadopago"

    def __init__(self, access_token: str, api_base: str = "https://api.mercadopago.com",
                 timeout_s: float = 15.0, session: Optional[requests.Session] = None):
        self.access_token = access_token
        self.api_base = api_base.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _call(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> ProviderResult:
        url = f"{self.api_base}{path}"
        try:
            resp = self.session.request(method, url, json=payload, headers=self._headers(),
                                        timeout=self.timeout_s)
        except requests.RequestException as e:
            log.error("[MP] %s %s falhou: %s", method, path, e)
            return ProviderResult(ok=False, status=None, data={"message": str(e)})
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"body": data}
        if not resp.ok:
            log.warning("[MP] %s %s -> HTTP %s", method, path, resp.status_code)
        return ProviderResult(ok=resp.ok, status=resp.status_code, data=data)

    def create_preference(self, payload: Dict[str, Any]) -> ProviderResult:
        return self._call("POST", "/checkout/preferences", payload)

    def get_payment(self, payment_id: str) -> ProviderResult:
        return self._call("GET", f"/v1/payments/{payment_id}")

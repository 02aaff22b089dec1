# payments/notification.py
"""
Resolução do payment_id de uma notificação do Mercado Pago.

O MP manda o id em formatos diferentes conforme o tipo de notificação
(webhook x IPN, versão da API...). Cada estratégia abaixo olha para um lugar
só e devolve o id ou None; a primeira que achar vence.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

_RAW_ID_RE = re.compile(r'"id"\s*:\s*"?(\d+)"?')
_NOT_PARSED = object()


@dataclass
class Notification:
    query: Mapping[str, str] = field(default_factory=dict)
    raw_body: str = ""
    _body: Any = field(default=_NOT_PARSED, init=False, repr=False)

    @property
    def body(self) -> Any:
        """Corpo JSON decodificado (None se vazio ou inválido)."""
        if self._body is _NOT_PARSED:
            try:
                self._body = json.loads(self.raw_body) if self.raw_body else None
            except ValueError:
                self._body = None
        return self._body


def _as_id(value: Any) -> Optional[str]:
    if not value or isinstance(value, (dict, list)):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def from_query_id(n: Notification) -> Optional[str]:
    return _as_id(n.query.get("id"))


def from_query_data_id(n: Notification) -> Optional[str]:
    return _as_id(n.query.get("data.id"))


def from_body_data_id(n: Notification) -> Optional[str]:
    body = n.body
    if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
        return None
    return _as_id(body["data"].get("id"))


def from_body_id(n: Notification) -> Optional[str]:
    body = n.body
    if not isinstance(body, dict):
        return None
    return _as_id(body.get("id"))


def from_resource_url(n: Notification) -> Optional[str]:
    # ex.: "https://api.mercadolibre.com/v1/payments/123456?foo=bar"
    body = n.body
    if not isinstance(body, dict):
        return None
    resource = body.get("resource")
    if not isinstance(resource, str) or "/payments/" not in resource:
        return None
    tail = resource.split("/payments/", 1)[1]
    return tail.split("?", 1)[0] or None


def from_raw_text(n: Notification) -> Optional[str]:
    m = _RAW_ID_RE.search(n.raw_body or "")
    return m.group(1) if m else None


Extractor = Callable[[Notification], Optional[str]]

EXTRACTORS: List[Extractor] = [
    from_query_id,
    from_query_data_id,
    from_body_data_id,
    from_body_id,
    from_resource_url,
    from_raw_text,
]


def resolve_payment_id(n: Notification, extractors: Optional[List[Extractor]] = None) -> Optional[str]:
    for extract in (extractors or EXTRACTORS):
        payment_id = extract(n)
        if payment_id:
            return payment_id
    return None

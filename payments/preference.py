# payments/preference.py
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Optional, Union

BACK_URL_PAGE = "pedido.html"
BACK_URL_STATUSES = ("success", "pending", "failure")


def normalize_base_url(base_url: str) -> str:
    return base_url.rstrip("/")


def build_back_urls(base_url: str, order_id: str) -> Dict[str, str]:
    # Sempre volta para a página do pedido (nunca para o checkout)
    return {
        s: f"{base_url}/{BACK_URL_PAGE}?status={s}&order_id={order_id}"
        for s in BACK_URL_STATUSES
    }


def cents_to_unit_price(total_cents: Union[int, float]) -> float:
    """unit_price do MP é em reais (number), com 2 casas."""
    cents = Decimal(str(total_cents))
    with localcontext() as ctx:
        # precisão suficiente para todos os dígitos inteiros + 2 casas
        ctx.prec = max(28, cents.adjusted() + 4)
        amount = (cents / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(amount)


def build_preference_payload(
    order_id: str,
    total_cents: Union[int, float],
    base_url: str,
    notification_url: Optional[str] = None,
    currency_id: str = "BRL",
) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    payload: Dict[str, Any] = {
        "items": [
            {
                "title": f"Pedido {order_id}",
                "quantity": 1,
                "currency_id": currency_id,
                "unit_price": cents_to_unit_price(total_cents),
            }
        ],
        "external_reference": order_id,
        "back_urls": build_back_urls(base, order_id),
    }
    if notification_url:
        payload["notification_url"] = notification_url
    # auto_return só em https (em localhost o MP não volta sozinho)
    if base.startswith("https://"):
        payload["auto_return"] = "approved"
    return payload

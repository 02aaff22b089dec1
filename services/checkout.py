import logging
from typing import Any, Dict, Tuple

from payments.preference import build_preference_payload
from utils.validators import PreferenceRequest

log = logging.getLogger(__name__)


def create_preference(req: PreferenceRequest, provider, currency_id: str = "BRL") -> Tuple[Dict[str, Any], int]:
    """
    Monta a preferência do Checkout Pro e envia ao MP.
    Em caso de erro do MP devolve 400 com status, corpo do MP e o payload enviado (para debug).
    """
    payload = build_preference_payload(
        order_id=req.order_id,
        total_cents=req.total_cents,
        base_url=req.base_url,
        notification_url=req.notification_url,
        currency_id=currency_id,
    )

    result = provider.create_preference(payload)
    if not result.ok:
        log.warning("[PREFERENCE] MP recusou preferência do pedido %s (HTTP %s)", req.order_id, result.status)
        return {
            "ok": False,
            "error": "Mercado Pago error",
            "status": result.status,
            "details": result.data,
            "sent": payload,
        }, 400

    log.info("[PREFERENCE] preferência %s criada para o pedido %s", result.data.get("id"), req.order_id)
    return {
        "ok": True,
        "preference_id": result.data.get("id"),
        "init_point": result.data.get("init_point"),
        "sandbox_init_point": result.data.get("sandbox_init_point"),
        "mode": req.mode,
        "external_reference": req.order_id,
        "back_urls": payload["back_urls"],
    }, 200

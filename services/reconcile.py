import logging
from typing import Any, Dict, Optional

from db.models import StoreError
from payments.status_map import map_mp_status

log = logging.getLogger(__name__)

PROVIDER_NAME = "mercadopago"


def _warn(message: str, **extra: Any) -> Dict[str, Any]:
    # Sempre ok=True: se respondermos erro o MP re-tenta indefinidamente
    log.warning("[WEBHOOK] %s%s", message, f" {extra}" if extra else "")
    out: Dict[str, Any] = {"ok": True, "warning": message}
    out.update(extra)
    return out


def reconcile_payment(payment_id: Optional[str], provider, store) -> Dict[str, Any]:
    """
    Busca o pagamento no MP, traduz o status e grava no pedido (external_reference = order_id).
    Qualquer falha depois da resolução do id vira resposta 200 com "warning".
    """
    if not payment_id:
        return _warn("No payment id found")

    result = provider.get_payment(payment_id)
    if not result.ok:
        return _warn("Could not fetch payment", mp_error=result.data)

    payment = result.data
    order_id = str(payment["external_reference"]) if payment.get("external_reference") else None
    mp_status = str(payment["status"]) if payment.get("status") else None

    if not order_id:
        return _warn("Missing external_reference on payment", mp_status=mp_status)

    mapped = map_mp_status(mp_status)
    try:
        store.update_payment(
            order_id,
            payment_provider=PROVIDER_NAME,
            payment_status=mapped.payment_status.value,
            status=mapped.status.value,
        )
    except StoreError as e:
        return _warn("Failed updating order", details=str(e))

    log.info("[WEBHOOK] pedido %s <- pagamento %s (%s -> %s/%s)", order_id, payment_id, mp_status,
             mapped.payment_status.value, mapped.status.value)
    return {
        "ok": True,
        "order_id": order_id,
        "payment_id": payment_id,
        "mp_status": mp_status,
        "updated": mapped.as_dict(),
    }

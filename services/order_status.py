from typing import Any, Dict, Tuple

from db.models import StoreError
from payments.status_map import OrderStatus, PaymentStatus


def get_order_status(order_id: str, store) -> Tuple[Dict[str, Any], int]:
    try:
        order = store.get_order(order_id)
    except StoreError as e:
        return {"ok": False, "error": "Pedido não encontrado", "details": str(e)}, 404

    return {
        "ok": True,
        "order_id": order.id,
        "payment_status": order.payment_status or PaymentStatus.PENDING.value,
        "status": order.status or OrderStatus.NOVO.value,
        "total_cents": order.total_cents,
        "created_at": order.created_at,
        "pay_on_delivery": order.pay_on_delivery is True,
        "change_for_cents": order.cash_change_cents,
    }, 200

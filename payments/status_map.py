# payments/status_map.py
from enum import Enum
from typing import Dict, NamedTuple, Optional


class MPStatus(str, Enum):
    # Status de pagamento do Mercado Pago (/v1/payments)
    APPROVED = "approved"
    PENDING = "pending"
    AUTHORIZED = "authorized"
    IN_PROCESS = "in_process"
    IN_MEDIATION = "in_mediation"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    CHARGED_BACK = "charged_back"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderStatus(str, Enum):
    # Etapas do pedido na loja
    NOVO = "novo"
    PREPARANDO = "preparando"
    CANCELADO = "cancelado"


class MappedStatus(NamedTuple):
    payment_status: PaymentStatus
    status: OrderStatus

    def as_dict(self) -> Dict[str, str]:
        return {"payment_status": self.payment_status.value, "status": self.status.value}


DEFAULT_MAPPING = MappedStatus(PaymentStatus.PENDING, OrderStatus.NOVO)

# Tudo que não estiver aqui (pending, in_process, desconhecidos...) cai em DEFAULT_MAPPING
STATUS_TABLE: Dict[MPStatus, MappedStatus] = {
    MPStatus.APPROVED: MappedStatus(PaymentStatus.PAID, OrderStatus.PREPARANDO),
    MPStatus.REJECTED: MappedStatus(PaymentStatus.REJECTED, OrderStatus.CANCELADO),
    MPStatus.CANCELLED: MappedStatus(PaymentStatus.CANCELLED, OrderStatus.CANCELADO),
    MPStatus.REFUNDED: MappedStatus(PaymentStatus.REFUNDED, OrderStatus.CANCELADO),
    MPStatus.CHARGED_BACK: MappedStatus(PaymentStatus.REFUNDED, OrderStatus.CANCELADO),
}


def parse_mp_status(raw: Optional[str]) -> Optional[MPStatus]:
    try:
        return MPStatus((raw or "").strip().lower())
    except ValueError:
        return None


def map_mp_status(raw: Optional[str]) -> MappedStatus:
    """Traduz o status do Mercado Pago (sem diferenciar maiúsculas) para o par interno."""
    mp_status = parse_mp_status(raw)
    if mp_status is None:
        return DEFAULT_MAPPING
    return STATUS_TABLE.get(mp_status, DEFAULT_MAPPING)

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from . import db_cursor, qp

ORDER_COLUMNS = "id, status, payment_status, store_id, created_at, total_cents, pay_on_delivery, cash_change_cents"


class StoreError(Exception):
    """Falha ao ler/gravar no banco de pedidos."""
    pass


class OrderNotFound(StoreError):
    pass


@dataclass
class Order:
    id: str
    status: Optional[str]
    payment_status: Optional[str]
    store_id: Optional[str]
    created_at: Optional[str]
    total_cents: Optional[int]
    pay_on_delivery: Optional[bool]
    cash_change_cents: Optional[int]

    @classmethod
    def from_row(cls, row: Any) -> "Order":
        created_at = row["created_at"]
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        pod = row["pay_on_delivery"]
        return cls(
            id=str(row["id"]),
            status=row["status"],
            payment_status=row["payment_status"],
            store_id=row["store_id"],
            created_at=created_at,
            total_cents=row["total_cents"],
            # sqlite guarda boolean como 0/1
            pay_on_delivery=None if pod is None else bool(pod),
            cash_change_cents=row["cash_change_cents"],
        )


class SqlOrderStore:
    """Pedidos via conexão direta (sqlite em dev, psycopg em Postgres)."""

    def __init__(self, database_url: str):
        self.database_url = database_url

    def get_order(self, order_id: str) -> Order:
        try:
            with db_cursor(self.database_url) as cur:
                cur.execute(qp(f"SELECT {ORDER_COLUMNS} FROM orders WHERE id = ?", self.database_url), (order_id,))
                row = cur.fetchone()
        except Exception as e:
            raise StoreError(str(e)) from e
        if not row:
            raise OrderNotFound(f"order {order_id} not found")
        return Order.from_row(row)

    def update_payment(self, order_id: str, payment_provider: str, payment_status: str, status: str) -> None:
        # last-write-wins: sem checagem de versão
        try:
            with db_cursor(self.database_url) as cur:
                cur.execute(
                    qp("UPDATE orders SET payment_provider = ?, payment_status = ?, status = ? WHERE id = ?",
                       self.database_url),
                    (payment_provider, payment_status, status, order_id),
                )
        except Exception as e:
            raise StoreError(str(e)) from e

    def create_order(self, order_id: str, total_cents: int, store_id: Optional[str] = None,
                     pay_on_delivery: bool = False, cash_change_cents: Optional[int] = None,
                     status: Optional[str] = "novo", payment_status: Optional[str] = "pending") -> None:
        """Somente para seed local/testes; em produção o pedido é criado pela loja."""
        with db_cursor(self.database_url) as cur:
            cur.execute(
                qp("INSERT INTO orders (id, store_id, status, payment_status, total_cents, pay_on_delivery, "
                   "cash_change_cents) VALUES (?,?,?,?,?,?,?)", self.database_url),
                (order_id, store_id, status, payment_status, total_cents, pay_on_delivery, cash_change_cents),
            )

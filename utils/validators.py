import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


class BadJSON(Exception):
    """Corpo da requisição não é JSON válido."""
    pass


class ValidationError(Exception):
    """Campo obrigatório ausente ou inválido; a mensagem vai direto para o cliente."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def parse_json_body(raw: Union[bytes, str, None]) -> Dict[str, Any]:
    """
    Decodifica o corpo como JSON e retorna um dict.
    Lança BadJSON se falhar ou se não for um objeto.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        data = json.loads(raw or "{}")
    except ValueError as e:
        raise BadJSON(f"JSON inválido: {e}")
    if not isinstance(data, dict):
        raise BadJSON("JSON inválido: esperado um objeto")
    return data


def _as_number(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, (int, float)):
        try:
            float(v)
        except OverflowError:
            # inteiro grande demais vira Infinity no JSON do navegador
            return None
        return v
    if isinstance(v, str):
        try:
            return float(v.strip())
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class PreferenceRequest:
    order_id: str
    total_cents: Union[int, float]
    base_url: str
    notification_url: Optional[str] = None
    mode: str = "test"


def validate_preference_request(body: Dict[str, Any]) -> PreferenceRequest:
    """
    Valida na ordem order_id -> total_cents -> base_url; o primeiro erro é o que volta.
    notification_url e mode são repassados sem validação.
    """
    order_id = body.get("order_id")
    if not isinstance(order_id, str) or not order_id.strip():
        raise ValidationError("order_id", "order_id obrigatório")

    total_cents = _as_number(body.get("total_cents"))
    if total_cents is None or not math.isfinite(total_cents) or total_cents <= 0:
        raise ValidationError("total_cents", "total_cents inválido")

    base_url = body.get("base_url")
    if not isinstance(base_url, str) or not base_url:
        raise ValidationError("base_url", "base_url obrigatório")

    notification_url = body.get("notification_url")
    if not isinstance(notification_url, str) or not notification_url:
        notification_url = None

    mode = body.get("mode")
    if not isinstance(mode, str) or not mode:
        mode = "test"

    return PreferenceRequest(
        order_id=order_id,
        total_cents=total_cents,
        base_url=base_url,
        notification_url=notification_url,
        mode=mode,
    )

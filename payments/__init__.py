# payments/__init__.py
from config import Settings


def get_payment_provider(settings: Settings):
    """
    Retorna o cliente do Mercado Pago configurado.
    Levanta ConfigError se MP_ACCESS_TOKEN não estiver definido (antes de qualquer chamada externa).
    """
    from .mercadopago import MercadoPagoProvider
    return MercadoPagoProvider(
        access_token=settings.require("mp_access_token"),
        api_base=settings.mp_api_base,
        timeout_s=settings.mp_timeout_s,
    )

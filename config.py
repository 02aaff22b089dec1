# config.py
import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Nome da variável de ambiente correspondente a cada campo (para mensagens de erro)
_ENV_NAMES = {
    "mp_access_token": "MP_ACCESS_TOKEN",
    "supabase_url": "SUPABASE_URL",
    "service_role_key": "SERVICE_ROLE_KEY",
    "database_url": "DATABASE_URL",
}


class ConfigError(Exception):
    """Configuração obrigatória ausente (credenciais, conexão do banco)."""
    pass


@dataclass(frozen=True)
class Settings:
    mp_access_token: str = ""
    mp_api_base: str = "https://api.mercadopago.com"
    mp_timeout_s: float = 15.0
    mp_currency_id: str = "BRL"
    order_store: str = "supabase"
    supabase_url: str = ""
    service_role_key: str = ""
    database_url: str = "sqlite:///pedidos.db"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Lê as variáveis uma única vez (no boot do processo).
        SERVICE_ROLE_KEY aceita o nome alternativo SUPABASE_SERVICE_ROLE_KEY.
        """
        env = os.environ if environ is None else environ
        service_key = env.get("SERVICE_ROLE_KEY") or env.get("SUPABASE_SERVICE_ROLE_KEY") or ""
        return cls(
            mp_access_token=env.get("MP_ACCESS_TOKEN", "").strip(),
            mp_api_base=env.get("MP_API_BASE", "https://api.mercadopago.com").rstrip("/"),
            mp_timeout_s=float(env.get("MP_TIMEOUT_S", "15")),
            mp_currency_id=env.get("MP_CURRENCY_ID", "BRL"),
            order_store=env.get("ORDER_STORE", "supabase").strip().lower(),
            supabase_url=env.get("SUPABASE_URL", "").strip().rstrip("/"),
            service_role_key=service_key.strip(),
            database_url=env.get("DATABASE_URL", "sqlite:///pedidos.db").strip(),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    def require(self, field: str) -> str:
        value = getattr(self, field)
        if not value:
            raise ConfigError(f"Missing {_ENV_NAMES.get(field, field.upper())} (Secrets)")
        return value

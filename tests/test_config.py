import dataclasses

import pytest

from config import ConfigError, Settings


def test_from_env_defaults():
    s = Settings.from_env({})
    assert s.mp_api_base == "https://api.mercadopago.com"
    assert s.order_store == "supabase"
    assert s.mp_currency_id == "BRL"
    assert s.mp_timeout_s == 15.0


def test_from_env_reads_values():
    s = Settings.from_env({
        "MP_ACCESS_TOKEN": " APP_USR-1 ",
        "SUPABASE_URL": "https://proj.supabase.co/",
        "SUPABASE_SERVICE_ROLE_KEY": "svc",
        "ORDER_STORE": "SQL",
        "LOG_LEVEL": "debug",
    })
    assert s.mp_access_token == "APP_USR-1"
    assert s.supabase_url == "https://proj.supabase.co"
    assert s.service_role_key == "svc"
    assert s.order_store == "sql"
    assert s.log_level == "DEBUG"


def test_service_role_key_takes_precedence():
    s = Settings.from_env({"SERVICE_ROLE_KEY": "a", "SUPABASE_SERVICE_ROLE_KEY": "b"})
    assert s.service_role_key == "a"


def test_settings_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Settings().mp_access_token = "x"


def test_require():
    assert Settings(mp_access_token="t").require("mp_access_token") == "t"
    with pytest.raises(ConfigError, match=r"Missing MP_ACCESS_TOKEN \(Secrets\)"):
        Settings().require("mp_access_token")

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

from flask import Flask, current_app, request, jsonify, make_response
from werkzeug.exceptions import HTTPException, MethodNotAllowed

from config import ConfigError, Settings
from db import get_order_store, init_db
from payments import get_payment_provider
from payments.notification import Notification, resolve_payment_id
from services.checkout import create_preference
from services.order_status import get_order_status
from services.reconcile import reconcile_payment
from utils.validators import BadJSON, ValidationError, parse_json_body, validate_preference_request

log = logging.getLogger(__name__)

# ==========================================================
# CORS
# ==========================================================
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _json(data, status: int = 200):
    return jsonify(data), status


def only(method: str):
    """
    Preflight OPTIONS responde "ok"; qualquer método diferente de `method` vira 405 JSON.
    """
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if request.method == "OPTIONS":
                return make_response("ok", 200)
            if request.method != method:
                raise MethodNotAllowed(valid_methods=[method, "OPTIONS"])
            return fn(*args, **kwargs)
        return wrapper
    return deco


# ==========================================================
# Dependências (config carregada uma vez; provider/store substituíveis em testes)
# ==========================================================
def _settings() -> Settings:
    return current_app.config["SETTINGS"]


def _provider():
    provider = current_app.extensions.get("payment_provider")
    return provider if provider is not None else get_payment_provider(_settings())


def _store():
    store = current_app.extensions.get("order_store")
    return store if store is not None else get_order_store(_settings())


# ==========================================================
# App
# ==========================================================
def create_app(settings: Optional[Settings] = None, provider=None, store=None) -> Flask:
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.extensions["payment_provider"] = provider
    app.extensions["order_store"] = store

    # Backend SQL (dev): cria a tabela orders se não existir
    if store is None and settings.order_store == "sql":
        try:
            init_db(settings.database_url)
            log.info("[BOOT] DB inicializado.")
        except Exception as e:
            log.warning("[BOOT][WARN] init_db falhou: %s", e)

    @app.after_request
    def _add_cors(resp):
        resp.headers.update(CORS_HEADERS)
        return resp

    @app.errorhandler(ConfigError)
    def _config_error(e):
        log.error("[CONFIG] %s", e)
        return _json({"ok": False, "error": str(e)}, 500)

    @app.errorhandler(ValidationError)
    def _validation_error(e):
        return _json({"ok": False, "error": e.message}, 400)

    @app.errorhandler(MethodNotAllowed)
    def _method_not_allowed(e):
        return _json({"ok": False, "error": "Method not allowed"}, 405)

    @app.errorhandler(Exception)
    def _unhandled(e):
        if isinstance(e, HTTPException):
            return _json({"ok": False, "error": e.description}, e.code)
        log.exception("[ERR] erro inesperado em %s", request.path)
        return _json({"ok": False, "error": str(e)}, 500)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "time": datetime.now(timezone.utc).isoformat()})

    # --------- Checkout Pro: cria preferência ---------
    @app.route("/mp-create-preference", methods=ALL_METHODS)
    @only("POST")
    def mp_create_preference():
        provider = _provider()  # ConfigError antes de qualquer validação/chamada externa
        try:
            body = parse_json_body(request.get_data(cache=True))
        except BadJSON:
            body = {}
        req = validate_preference_request(body)
        data, status = create_preference(req, provider, currency_id=_settings().mp_currency_id)
        return _json(data, status)

    # --------- Webhook Mercado Pago ---------
    @app.route("/mp-webhook", methods=ALL_METHODS)
    @only("POST")
    def mp_webhook():
        """
        Webhook tolerante:
        - Responde 200 mesmo quando não consegue processar (id ausente, MP fora, update falhou),
          com "warning" no corpo, para o MP não re-tentar sem parar.
        - Erro HTTP só para método errado ou configuração ausente.
        """
        store = _store()
        provider = _provider()
        notification = Notification(
            query=request.args,
            raw_body=request.get_data(cache=True, as_text=True),
        )
        payment_id = resolve_payment_id(notification)
        return _json(reconcile_payment(payment_id, provider, store))

    # --------- Status do pedido (polling do front) ---------
    @app.route("/order-status", methods=ALL_METHODS)
    @only("GET")
    def order_status():
        store = _store()
        order_id = request.args.get("order_id")
        if not order_id:
            return _json({"ok": False, "error": "order_id é obrigatório"}, 400)
        data, status = get_order_status(order_id, store)
        return _json(data, status)

    log.info("[BOOT] app iniciado (order_store=%s).", settings.order_store)
    return app


# WSGI (gunicorn app:app); settings lidos do ambiente no boot
app = create_app()

# ==========================================================
# Boot local
# ==========================================================
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)

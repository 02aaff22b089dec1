# db/__init__.py
import re
from contextlib import contextmanager
from pathlib import Path

from config import Settings


def is_postgres(database_url: str) -> bool:
    return database_url.startswith(("postgres://", "postgresql://"))

# ---------------------------
# Conexões (psycopg | sqlite)
# ---------------------------
def _ensure_sqlite_path(url: str) -> str:
    # Aceita: sqlite:///arquivo.db | sqlite:////abs/arquivo.db | pedidos.db
    if url.startswith("sqlite:////"):
        return url.replace("sqlite:////", "/", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "", 1)
    return url

def get_connection(database_url: str):
    """
    Retorna uma conexão aberta (psycopg ou sqlite3).
    Para Postgres: autocommit desabilitado; commit/rollback feito em db_cursor().
    """
    if is_postgres(database_url):
        import psycopg
        from psycopg.rows import dict_row

        # sslmode=require (Supabase/Neon) já vem na URL
        return psycopg.connect(database_url, row_factory=dict_row)

    import sqlite3

    path = _ensure_sqlite_path(database_url)
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, timeout=30, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn

@contextmanager
def db_cursor(database_url: str):
    """
    Context manager que abre conexão + cursor e faz commit/rollback.
    Usa transação explícita em ambos os bancos.
    """
    conn = get_connection(database_url)
    cur = None
    try:
        cur = conn.cursor()
        if not is_postgres(database_url):
            # psycopg já inicia transação na primeira operação
            conn.execute("BEGIN")
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if cur is not None:
            cur.close()
        conn.close()

# ---------------------------
# Helpers SQL (placeholders)
# ---------------------------
def qp(sql: str, database_url: str) -> str:
    """
    Converte placeholders estilo SQLite ('?') para Postgres ('%s') quando necessário.
    """
    if is_postgres(database_url):
        return sql.replace("?", "%s")
    return sql

# ---------------------------
# DDL (somente desenvolvimento local; em produção o schema é do Supabase)
# ---------------------------
DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS orders (
        id                TEXT PRIMARY KEY,
        store_id          TEXT,
        status            TEXT DEFAULT 'novo',
        payment_status    TEXT DEFAULT 'pending',
        payment_provider  TEXT,
        total_cents       INTEGER NOT NULL,
        pay_on_delivery   BOOLEAN DEFAULT FALSE,
        cash_change_cents INTEGER,
        created_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

def _adapt_ddl_for_sqlite(sql: str, database_url: str) -> str:
    if is_postgres(database_url):
        return sql
    sql = re.sub(r"\bBOOLEAN DEFAULT FALSE\b", "INTEGER DEFAULT 0", sql, flags=re.I)
    sql = sql.replace("TIMESTAMP DEFAULT CURRENT_TIMESTAMP", "DATETIME DEFAULT CURRENT_TIMESTAMP")
    return sql

def init_db(database_url: str):
    """
    Cria as tabelas se não existirem. Idempotente.
    """
    with db_cursor(database_url) as cur:
        for stmt in DDL_STATEMENTS:
            cur.execute(_adapt_ddl_for_sqlite(stmt, database_url))


def get_order_store(settings: Settings):
    """
    Retorna o backend de pedidos conforme ORDER_STORE.
    - supabase (default): PostgREST com a service role key.
    - sql: conexão direta (DATABASE_URL), útil em dev/testes.
    Levanta ConfigError se faltar credencial.
    """
    if settings.order_store == "sql":
        from .models import SqlOrderStore
        return SqlOrderStore(settings.require("database_url"))
    from .supabase import SupabaseOrderStore
    return SupabaseOrderStore(
        url=settings.require("supabase_url"),
        service_role_key=settings.require("service_role_key"),
        timeout_s=settings.mp_timeout_s,
    )

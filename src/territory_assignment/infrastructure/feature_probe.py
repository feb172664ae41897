# ============================================================
# 📦 src/territory_assignment/infrastructure/feature_probe.py
# ============================================================

from dataclasses import dataclass

from loguru import logger
from psycopg2 import DatabaseError, InterfaceError

from database.db_connection import ConnectionProvider


@dataclass(frozen=True)
class RecursosDisponiveis:
    """Recursos opcionais do schema, verificados uma vez no startup."""
    notificacoes: bool = False
    geocoding_metadata: bool = False


def detectar_recursos(provider: ConnectionProvider) -> RecursosDisponiveis:
    sql_tabela = """
        SELECT 1 FROM information_schema.tables
        WHERE table_schema = current_schema() AND table_name = %s
        LIMIT 1;
    """
    sql_coluna = """
        SELECT 1 FROM information_schema.columns
        WHERE table_schema = current_schema() AND table_name = %s AND column_name = %s
        LIMIT 1;
    """

    try:
        with provider.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql_tabela, ("notificacoes",))
                notificacoes = cur.fetchone() is not None

                cur.execute(sql_coluna, ("locais", "geocoding_data"))
                metadata = cur.fetchone() is not None
    except (DatabaseError, InterfaceError) as e:
        logger.warning(f"⚠️ [FEATURES] Falha ao inspecionar schema, recursos opcionais desligados: {e}")
        return RecursosDisponiveis()

    recursos = RecursosDisponiveis(notificacoes=notificacoes, geocoding_metadata=metadata)
    logger.info(f"🧩 Recursos opcionais: {recursos}")
    return recursos

# ============================================================
# 📦 src/territory_assignment/infrastructure/database_writer.py
# ============================================================

from datetime import datetime

from loguru import logger
from psycopg2.extras import Json

from database.db_connection import ConnectionProvider, retry_on_failure
from territory_assignment.domain.entities import GeoPoint
from territory_assignment.infrastructure.feature_probe import RecursosDisponiveis


class DatabaseWriter:
    """
    Persiste o cache de coordenadas e a atribuição de representante
    no registro do local. Todos os métodos devolvem True/False.
    """

    def __init__(self, provider: ConnectionProvider, recursos: RecursosDisponiveis = RecursosDisponiveis()):
        self.provider = provider
        self.recursos = recursos

    # ============================================================
    # 📍 Cache de coordenadas
    # ============================================================
    @retry_on_failure(default=False)
    def salvar_coordenadas(self, local_id: str, ponto: GeoPoint, fonte: str) -> bool:
        agora = datetime.now()

        if self.recursos.geocoding_metadata:
            sql = """
                UPDATE locais
                SET latitude = %s,
                    longitude = %s,
                    geocoding_data = %s,
                    geocoding_atualizado_em = %s
                WHERE id = %s;
            """
            metadata = {
                "lat": ponto.latitude,
                "lng": ponto.longitude,
                "fonte": fonte,
                "atualizado_em": agora.isoformat(),
            }
            params = (ponto.latitude, ponto.longitude, Json(metadata), agora, local_id)
        else:
            sql = "UPDATE locais SET latitude = %s, longitude = %s WHERE id = %s;"
            params = (ponto.latitude, ponto.longitude, local_id)

        with self.provider.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                atualizado = cur.rowcount > 0

        logger.debug(f"💾 [COORD] local={local_id} lat={ponto.latitude} lon={ponto.longitude} fonte={fonte}")
        return atualizado

    # ============================================================
    # 👤 Atribuição
    # ============================================================
    @retry_on_failure(default=False)
    def salvar_atribuicao(self, local_id: str, representante_id: str, atribuido_em: datetime) -> bool:
        with self.provider.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE locais
                    SET representante_id = %s,
                        atribuido_em = %s
                    WHERE id = %s;
                    """,
                    (representante_id, atribuido_em, local_id),
                )
                atualizado = cur.rowcount > 0

        logger.info(f"💾 [ATRIBUICAO] local={local_id} -> representante={representante_id}")
        return atualizado

    # ============================================================
    # 🔔 Notificação (opcional no schema)
    # ============================================================
    @retry_on_failure(default=False)
    def criar_notificacao(self, titulo: str, mensagem: str, tipo: str = "assignment", severidade: str = "info") -> bool:
        if not self.recursos.notificacoes:
            logger.debug("🔕 Tabela de notificações indisponível, notificação não criada")
            return False

        with self.provider.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO notificacoes (tipo, titulo, mensagem, severidade, criado_em)
                    VALUES (%s, %s, %s, %s, %s);
                    """,
                    (tipo, titulo, mensagem, severidade, datetime.now()),
                )
        return True

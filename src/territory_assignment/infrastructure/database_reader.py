# ============================================================
# 📦 src/territory_assignment/infrastructure/database_reader.py
# ============================================================

import json
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger
from psycopg2.extras import RealDictCursor

from database.db_connection import ConnectionProvider, retry_on_failure
from territory_assignment.domain.address_normalizer import address_from_raw
from territory_assignment.domain.entities import BusinessLocation, GeoPoint, Representative
from territory_assignment.domain.territory_parser import representante_from_row

COLUNAS_REPRESENTANTE = """
    id, nome, ativo, territorio_ativo, territorio_tipo, base_cidade,
    base_latitude, base_longitude, raio_km, poligono_pontos, areas_cobertura
"""

COLUNAS_LOCAL = """
    id, nome, endereco, latitude, longitude, representante_id, atribuido_em
"""


# ============================================================
# 🔄 Linhas -> entidades
# ============================================================
def local_from_row(row: Mapping[str, Any]) -> BusinessLocation:
    endereco = row.get("endereco")
    if isinstance(endereco, str):
        try:
            endereco = json.loads(endereco)
        except ValueError:
            logger.warning(f"⚠️ [LOCAL] endereço não-JSON no local {row.get('id')}")
            endereco = None

    coordenada: Optional[GeoPoint] = None
    lat, lon = row.get("latitude"), row.get("longitude")
    if lat is not None and lon is not None:
        try:
            coordenada = GeoPoint(float(lat), float(lon))
        except ValueError as e:
            logger.warning(f"⚠️ [LOCAL] coordenada inválida no local {row.get('id')}: {e}")

    rep_id = row.get("representante_id")
    return BusinessLocation(
        id=str(row["id"]),
        name=row.get("nome"),
        address=address_from_raw(endereco if isinstance(endereco, Mapping) else None),
        coordinate=coordenada,
        assigned_representative_id=str(rep_id) if rep_id is not None else None,
        assigned_at=row.get("atribuido_em"),
    )


class DatabaseReader:
    """
    Leitura de representantes e locais no PostgreSQL.
    O território é validado aqui, uma única vez por carga.
    """

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider

    def _fetchall(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        with self.provider.connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(sql, params)
                return list(cur.fetchall())

    # ============================================================
    # 👤 Representantes
    # ============================================================
    @retry_on_failure(default=None)
    def listar_representantes(self) -> Optional[List[Representative]]:
        """
        Snapshot dos representantes ativos com território ativo, ordenados por id.
        None quando o banco não responde (diferente de lista vazia).
        """
        rows = self._fetchall(
            f"""
            SELECT {COLUNAS_REPRESENTANTE}
            FROM representantes
            WHERE ativo = TRUE AND territorio_ativo = TRUE
            ORDER BY id;
            """
        )
        representantes = [representante_from_row(r) for r in rows]
        logger.debug(f"👥 {len(representantes)} representantes com território ativo carregados")
        return representantes

    @retry_on_failure()
    def buscar_representante(self, representante_id: str) -> Optional[Representative]:
        rows = self._fetchall(
            f"SELECT {COLUNAS_REPRESENTANTE} FROM representantes WHERE id = %s LIMIT 1;",
            (representante_id,),
        )
        return representante_from_row(rows[0]) if rows else None

    @retry_on_failure(default={})
    def mapa_status_representantes(self) -> Dict[str, bool]:
        """id -> ativo, incluindo inativos."""
        rows = self._fetchall("SELECT id, ativo FROM representantes;")
        return {str(r["id"]): bool(r["ativo"]) for r in rows}

    # ============================================================
    # 🍽️ Locais
    # ============================================================
    @retry_on_failure()
    def buscar_local(self, local_id: str) -> Optional[BusinessLocation]:
        rows = self._fetchall(
            f"SELECT {COLUNAS_LOCAL} FROM locais WHERE id = %s LIMIT 1;",
            (local_id,),
        )
        return local_from_row(rows[0]) if rows else None

    @retry_on_failure(default=())
    def listar_locais(self) -> List[BusinessLocation]:
        rows = self._fetchall(f"SELECT {COLUNAS_LOCAL} FROM locais ORDER BY id;")
        return [local_from_row(r) for r in rows]

    @retry_on_failure(default=())
    def listar_locais_sem_representante(self) -> List[BusinessLocation]:
        rows = self._fetchall(
            f"SELECT {COLUNAS_LOCAL} FROM locais WHERE representante_id IS NULL ORDER BY id;"
        )
        return [local_from_row(r) for r in rows]

    @retry_on_failure(default=())
    def listar_locais_sem_coordenadas(self) -> List[BusinessLocation]:
        rows = self._fetchall(
            f"""
            SELECT {COLUNAS_LOCAL}
            FROM locais
            WHERE latitude IS NULL OR longitude IS NULL
            ORDER BY id;
            """
        )
        return [local_from_row(r) for r in rows]

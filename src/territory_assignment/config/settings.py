# ============================================================
# 📦 src/territory_assignment/config/settings.py
# ============================================================

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


def _env_bool(valor: Optional[str], padrao: bool = False) -> bool:
    if valor is None:
        return padrao
    return valor.strip().lower() in ("1", "true", "yes", "sim", "on")


@dataclass(frozen=True)
class Settings:
    """
    Configuração de runtime lida do ambiente.
    Construída uma única vez pelo host (API / CLI) e repassada adiante.
    """

    # ============================================================
    # 🗄️ PostgreSQL
    # ============================================================
    db_params: Dict[str, Any] = field(default_factory=dict)
    db_pool_min: int = 1
    db_pool_max: int = 10

    # ============================================================
    # 🌐 Google Maps
    # ============================================================
    google_maps_api_key: Optional[str] = None
    geocoding_timeout: float = 5.0
    geocoding_region: str = "br"
    usar_estimativa_cep: bool = False
    distance_matrix_batch_size: int = 25
    distance_matrix_pausa: float = 0.1

    # ============================================================
    # 🔁 Operações em lote
    # ============================================================
    resync_pausa: float = 1.1

    # ============================================================
    # 🔐 JWT
    # ============================================================
    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"

    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        db_params = {
            "dbname": env.get("DB_NAME", env.get("POSTGRES_DB", "sales_territory_db")),
            "user": env.get("DB_USER", env.get("POSTGRES_USER", "postgres")),
            "password": env.get("DB_PASSWORD", env.get("POSTGRES_PASSWORD", "postgres")),
            "host": env.get("DB_HOST", env.get("POSTGRES_HOST", "localhost")),
            "port": env.get("DB_PORT", env.get("POSTGRES_PORT", "5432")),
            "connect_timeout": int(env.get("DB_CONNECT_TIMEOUT", "10")),
            "application_name": env.get("DB_APP_NAME", "territory_assignment"),
        }

        return cls(
            db_params=db_params,
            db_pool_min=int(env.get("DB_POOL_MIN", "1")),
            db_pool_max=int(env.get("DB_POOL_MAX", "10")),
            google_maps_api_key=env.get("GMAPS_API_KEY") or None,
            geocoding_timeout=float(env.get("GEOCODING_TIMEOUT", "5")),
            geocoding_region=env.get("GEOCODING_REGION", "br"),
            usar_estimativa_cep=_env_bool(env.get("USE_CEP_ESTIMATE")),
            distance_matrix_batch_size=int(env.get("DISTANCE_MATRIX_BATCH_SIZE", "25")),
            distance_matrix_pausa=float(env.get("DISTANCE_MATRIX_PAUSE", "0.1")),
            resync_pausa=float(env.get("RESYNC_PAUSE", "1.1")),
            jwt_secret_key=env.get("JWT_SECRET_KEY") or None,
            jwt_algorithm=env.get("JWT_ALGORITHM", "HS256"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_file=env.get("LOG_FILE") or None,
        )

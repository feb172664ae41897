# ============================================================
# 📦 src/territory_assignment/infrastructure/distance_matrix_service.py
# ============================================================

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests
from loguru import logger

from territory_assignment.domain.entities import GeoPoint

GOOGLE_DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
MODOS_VALIDOS = ("driving", "walking", "bicycling", "transit")


@dataclass(frozen=True)
class RouteDistance:
    distance_km: float
    duration_minutes: float


@dataclass(frozen=True)
class BatchDistance:
    id: str
    distance_km: float
    duration_minutes: float


class DistanceMatrixService:
    """
    Distância/tempo reais via Google Distance Matrix.
    Apenas informativo: a atribuição de território usa sempre Haversine.
    """

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
        region: str = "br",
        batch_size: int = 25,
        pausa_entre_lotes: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
        url: str = GOOGLE_DISTANCE_MATRIX_URL,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.region = region
        self.batch_size = batch_size
        self.pausa_entre_lotes = pausa_entre_lotes
        self.sleep = sleep
        self.url = url

        self.req_count = 0
        self.req_falhas = 0

    @staticmethod
    def _fmt(p: GeoPoint) -> str:
        return f"{p.latitude},{p.longitude}"

    @staticmethod
    def _validar_modo(mode: str):
        if mode not in MODOS_VALIDOS:
            raise ValueError(f"Modo inválido '{mode}' (use {', '.join(MODOS_VALIDOS)})")

    # ============================================================
    # 🌐 Chamada HTTP -> lista de elements (ou None)
    # ============================================================
    def _consultar(self, origem: GeoPoint, destinos: Sequence[GeoPoint], mode: str) -> Optional[List[Dict[str, Any]]]:
        if not self.api_key:
            logger.warning("⚠️ [DISTANCE_MATRIX] GMAPS_API_KEY não configurada")
            return None

        params = {
            "origins": self._fmt(origem),
            "destinations": "|".join(self._fmt(d) for d in destinos),
            "mode": mode,
            "language": "pt-BR",
            "region": self.region,
            "key": self.api_key,
        }

        self.req_count += 1
        try:
            r = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            self.req_falhas += 1
            logger.warning(f"⚠️ [DISTANCE_MATRIX] Falha de conexão: {e}")
            return None

        if not 200 <= r.status_code < 300:
            self.req_falhas += 1
            logger.warning(f"⚠️ [DISTANCE_MATRIX] HTTP {r.status_code}")
            return None

        try:
            data = r.json()
        except ValueError as e:
            self.req_falhas += 1
            logger.warning(f"⚠️ [DISTANCE_MATRIX] JSON inválido: {e}")
            return None

        if data.get("status") != "OK" or not data.get("rows"):
            self.req_falhas += 1
            logger.warning(
                f"⚠️ [DISTANCE_MATRIX] status={data.get('status')} - "
                f"{data.get('error_message') or 'Erro desconhecido'}"
            )
            return None

        return data["rows"][0].get("elements") or []

    @staticmethod
    def _converter(element: Optional[Dict[str, Any]]) -> Optional[Tuple[float, float]]:
        if not element or element.get("status") != "OK":
            return None
        try:
            distancia_km = round(element["distance"]["value"] / 1000, 2)
            duracao_min = round(element["duration"]["value"] / 60)
        except (KeyError, TypeError) as e:
            logger.warning(f"⚠️ [DISTANCE_MATRIX] element sem distance/duration: {e}")
            return None
        return distancia_km, duracao_min

    # ============================================================
    # 🚗 Par único
    # ============================================================
    def real_route_km(
        self, origin: GeoPoint, destination: GeoPoint, mode: str = "driving"
    ) -> Optional[RouteDistance]:
        self._validar_modo(mode)

        elements = self._consultar(origin, [destination], mode)
        if not elements:
            return None

        convertido = self._converter(elements[0])
        if convertido is None:
            logger.warning(f"⚠️ [DISTANCE_MATRIX] element status={elements[0].get('status')}")
            return None

        distancia_km, duracao_min = convertido
        logger.debug(f"📍 Distance Matrix: {distancia_km:.2f} km / {duracao_min} min ({mode})")
        return RouteDistance(distance_km=distancia_km, duration_minutes=duracao_min)

    # ============================================================
    # 📦 Lote (até batch_size destinos por requisição)
    # ============================================================
    def calcular_distancias_em_lote(
        self,
        origin: GeoPoint,
        destinos: Sequence[Tuple[str, GeoPoint]],
        mode: str = "driving",
    ) -> List[BatchDistance]:
        """
        Mantém a ordem de entrada. Falhas viram distância/tempo infinitos.
        """
        self._validar_modo(mode)
        resultados: List[BatchDistance] = []

        for inicio in range(0, len(destinos), self.batch_size):
            lote = destinos[inicio:inicio + self.batch_size]
            n_lote = inicio // self.batch_size + 1

            elements = self._consultar(origin, [p for _, p in lote], mode)
            if elements is None:
                logger.warning(f"⚠️ [DISTANCE_MATRIX] Lote {n_lote} falhou ({len(lote)} destinos)")
                elements = []

            for idx, (dest_id, _) in enumerate(lote):
                convertido = self._converter(elements[idx] if idx < len(elements) else None)
                if convertido is None:
                    resultados.append(BatchDistance(dest_id, math.inf, math.inf))
                else:
                    resultados.append(BatchDistance(dest_id, convertido[0], convertido[1]))

            if inicio + self.batch_size < len(destinos):
                self.sleep(self.pausa_entre_lotes)

        logger.info(
            f"📊 Distance Matrix: {len(destinos)} destinos | requisições={self.req_count} | falhas={self.req_falhas}"
        )
        return resultados

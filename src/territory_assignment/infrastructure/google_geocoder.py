# ============================================================
# 📦 src/territory_assignment/infrastructure/google_geocoder.py
# ============================================================

import time
from typing import Optional, Sequence

import requests
from loguru import logger

from territory_assignment.domain.address_normalizer import montar_consulta
from territory_assignment.domain.entities import Address, GeocodeHit, GeoPoint
from territory_assignment.domain.utils_geo import coordenada_generica

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
FONTE_GOOGLE = "google_maps"


class GoogleGeocoder:
    """
    Adaptador da Google Geocoding API.

    Nunca levanta exceção: falha de rede, status HTTP != 2xx,
    status da API != "OK" ou coordenada genérica viram None.
    Cache é responsabilidade de quem chama.
    """

    name = FONTE_GOOGLE

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
        region: str = "br",
        url: str = GOOGLE_GEOCODE_URL,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.region = region
        self.url = url

    def resolver(self, address: Address) -> Optional[GeocodeHit]:
        consulta = montar_consulta(address)
        if not consulta:
            return None

        trace = f"GEO-{int(time.time() * 1000)}"

        if not self.api_key:
            logger.warning(f"[{trace}][GOOGLE][SEM_CHAVE] GMAPS_API_KEY não configurada")
            return None

        params = {"address": consulta, "key": self.api_key, "region": self.region}
        logger.debug(f"[{trace}][GOOGLE][REQ] address='{consulta}'")

        try:
            r = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"[{trace}][GOOGLE][ERRO] {e}")
            return None

        if not 200 <= r.status_code < 300:
            logger.warning(f"[{trace}][GOOGLE][HTTP] status={r.status_code}")
            return None

        try:
            data = r.json()
        except ValueError as e:
            logger.warning(f"[{trace}][GOOGLE][JSON] resposta inválida: {e}")
            return None

        status = data.get("status")
        resultados = data.get("results") or []
        if status != "OK" or not resultados:
            logger.warning(
                f"[{trace}][GOOGLE][MISS] status={status} - "
                f"{data.get('error_message') or 'Endereço não encontrado'}"
            )
            return None

        try:
            loc = resultados[0]["geometry"]["location"]
            ponto = GeoPoint(float(loc["lat"]), float(loc["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"[{trace}][GOOGLE][PAYLOAD] geometry.location ausente ou inválida: {e}")
            return None

        if coordenada_generica(ponto):
            logger.warning(
                f"[{trace}][GOOGLE][GENERICA] lat={ponto.latitude} lon={ponto.longitude} descartada"
            )
            return None

        logger.info(f"[{trace}][GOOGLE][OK] lat={ponto.latitude} lon={ponto.longitude}")
        return GeocodeHit(ponto, FONTE_GOOGLE)

    def geocode(self, address: Address) -> Optional[GeoPoint]:
        hit = self.resolver(address)
        return hit.point if hit else None


class GeocodingChain:
    """Tenta cada geocodificador em ordem; o primeiro acerto vence."""

    def __init__(self, geocoders: Sequence):
        self.geocoders = tuple(geocoders)

    def resolver(self, address: Address) -> Optional[GeocodeHit]:
        for geocoder in self.geocoders:
            hit = geocoder.resolver(address)
            if hit is not None:
                return hit
            logger.debug(f"[GEOCODING_CHAIN] {getattr(geocoder, 'name', geocoder)} sem resultado")
        return None

    def geocode(self, address: Address) -> Optional[GeoPoint]:
        hit = self.resolver(address)
        return hit.point if hit else None

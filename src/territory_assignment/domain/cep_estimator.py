# ============================================================
# 📦 src/territory_assignment/domain/cep_estimator.py
# ============================================================

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from loguru import logger

from territory_assignment.domain.address_normalizer import normalizar_texto
from territory_assignment.domain.entities import Address, GeocodeHit, GeoPoint
from territory_assignment.domain.utils_geo import normalizar_cep


@dataclass(frozen=True)
class FaixaCep:
    minimo: int
    maximo: int
    lat: float
    lon: float
    nome: str


# ============================================================
# 📍 Faixas de CEP (prefixo de 5 dígitos) -> centro aproximado
# ============================================================
FAIXAS_CEP: Tuple[FaixaCep, ...] = (
    FaixaCep(1000, 5999, -23.5505, -46.6333, "São Paulo Centro"),
    FaixaCep(6000, 8499, -23.5329, -46.7884, "São Paulo Zona Oeste"),
    FaixaCep(8500, 8899, -23.6528, -46.5547, "São Paulo Zona Leste"),
    FaixaCep(18000, 18999, -23.5015, -47.4526, "Sorocaba"),
    FaixaCep(20000, 23799, -22.9068, -43.1729, "Rio de Janeiro"),
    FaixaCep(70000, 72799, -15.7801, -47.9292, "Brasília"),
    FaixaCep(30000, 34999, -19.9167, -43.9345, "Belo Horizonte"),
    FaixaCep(60000, 61999, -3.7172, -38.5433, "Fortaleza"),
    FaixaCep(40000, 42599, -12.9714, -38.5014, "Salvador"),
    FaixaCep(80000, 82999, -25.4284, -49.2733, "Curitiba"),
    FaixaCep(90000, 94999, -30.0346, -51.2177, "Porto Alegre"),
    FaixaCep(50000, 54999, -8.0476, -34.8770, "Recife"),
    FaixaCep(69000, 69099, -3.1190, -60.0217, "Manaus"),
)

COORDENADAS_CIDADES: Dict[str, Tuple[float, float]] = {
    normalizar_texto(nome): coord
    for nome, coord in {
        "São Paulo": (-23.5505, -46.6333),
        "Sorocaba": (-23.5015, -47.4526),
        "Rio de Janeiro": (-22.9068, -43.1729),
        "Fortaleza": (-3.7172, -38.5433),
        "Brasília": (-15.7801, -47.9292),
        "Belo Horizonte": (-19.9167, -43.9345),
        "Salvador": (-12.9714, -38.5014),
        "Curitiba": (-25.4284, -49.2733),
        "Porto Alegre": (-30.0346, -51.2177),
        "Recife": (-8.0476, -34.8770),
        "Manaus": (-3.1190, -60.0217),
    }.items()
}

FONTE_FAIXA_CEP = "cep_estimate"
FONTE_CIDADE = "city_table"


class CepEstimator:
    """
    Estimativa estática (sem rede) de coordenadas a partir do CEP,
    com fallback para o centro da cidade.
    """

    name = "cep_estimator"

    def estimar_por_cep(self, cep: Optional[str]) -> Optional[GeoPoint]:
        digitos = normalizar_cep(cep)
        if digitos is None:
            return None

        prefixo = int(digitos[:5])
        for faixa in FAIXAS_CEP:
            if faixa.minimo <= prefixo <= faixa.maximo:
                # jitter determinístico: CEPs da mesma faixa não colidem
                sub_regiao = int(digitos[5:8])
                variacao = (sub_regiao / 1000) * 0.05 - 0.025
                return GeoPoint(faixa.lat + variacao, faixa.lon + variacao)

        return None

    @staticmethod
    def estimar_por_cidade(cidade: Optional[str]) -> Optional[GeoPoint]:
        coord = COORDENADAS_CIDADES.get(normalizar_texto(cidade))
        return GeoPoint(*coord) if coord else None

    def resolver(self, address: Address) -> Optional[GeocodeHit]:
        ponto = self.estimar_por_cep(address.postal_code)
        if ponto is not None:
            logger.debug(f"[CEP_ESTIMATE][OK] cep={address.postal_code} -> {ponto.as_tuple()}")
            return GeocodeHit(ponto, FONTE_FAIXA_CEP)

        ponto = self.estimar_por_cidade(address.city)
        if ponto is not None:
            logger.debug(f"[CITY_TABLE][OK] cidade={address.city} -> {ponto.as_tuple()}")
            return GeocodeHit(ponto, FONTE_CIDADE)

        logger.debug(f"[CEP_ESTIMATE][MISS] cep={address.postal_code} cidade={address.city}")
        return None

    def geocode(self, address: Address) -> Optional[GeoPoint]:
        hit = self.resolver(address)
        return hit.point if hit else None

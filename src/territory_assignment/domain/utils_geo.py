# ============================================================
# 📦 src/territory_assignment/domain/utils_geo.py
# ============================================================

from typing import Optional, Tuple

from geopy.distance import geodesic

from territory_assignment.domain.address_normalizer import somente_digitos
from territory_assignment.domain.entities import GeoPoint

# Pontos devolvidos por provedores quando a consulta não é resolvida
# (ponto, raio em km dentro do qual a resposta é descartada).
PONTOS_GENERICOS: Tuple[Tuple[GeoPoint, float], ...] = (
    (GeoPoint(-14.235004, -51.92528), 10.0),  # centro do Brasil (Google)
)


def normalizar_cep(cep: Optional[str]) -> Optional[str]:
    """
    '18.030-310', '18030 310', 'CEP 18030-310' -> '18030310'.
    None quando não sobram exatamente 8 dígitos ou o CEP é só zeros.
    """
    digitos = somente_digitos(cep)
    if len(digitos) != 8 or digitos == "00000000":
        return None
    return digitos


def coordenada_generica(ponto: GeoPoint) -> bool:
    if abs(ponto.latitude) < 0.0001 and abs(ponto.longitude) < 0.0001:
        return True

    return any(
        geodesic(ponto.as_tuple(), generico.as_tuple()).km < raio_km
        for generico, raio_km in PONTOS_GENERICOS
    )

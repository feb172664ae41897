# ============================================================
# 📦 src/territory_assignment/domain/haversine_utils.py
# ============================================================

import math

from territory_assignment.domain.entities import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """
    Distância de grande círculo entre dois pontos, em km, com 2 casas decimais.
    """
    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlambda = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return round(EARTH_RADIUS_KM * c, 2)

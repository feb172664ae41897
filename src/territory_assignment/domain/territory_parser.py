# ============================================================
# 📦 src/territory_assignment/domain/territory_parser.py
# ============================================================

import json
from typing import Any, List, Mapping, Optional, Tuple

from loguru import logger

from territory_assignment.domain.entities import (
    CoverageArea,
    GeoPoint,
    MultiAreaTerritory,
    PolygonTerritory,
    RadiusTerritory,
    Representative,
    Territory,
)

TIPOS_RAIO = ("raio", "radius")
TIPOS_POLIGONO = ("poligono", "polygon")


class InvalidTerritoryConfig(ValueError):
    """Configuração de território malformada para um representante."""


def _carregar_json(valor: Any) -> Any:
    if isinstance(valor, (str, bytes)):
        try:
            return json.loads(valor)
        except ValueError as e:
            raise InvalidTerritoryConfig(f"JSON inválido: {e}")
    return valor


def _ponto(raw: Mapping[str, Any]) -> GeoPoint:
    lat = raw.get("lat", raw.get("latitude"))
    lng = raw.get("lng", raw.get("lon", raw.get("longitude")))
    if lat is None or lng is None:
        raise InvalidTerritoryConfig(f"ponto sem lat/lng: {raw}")
    try:
        return GeoPoint(float(lat), float(lng))
    except (TypeError, ValueError) as e:
        raise InvalidTerritoryConfig(f"ponto inválido {raw}: {e}")


# ============================================================
# ⭕ Raio
# ============================================================
def parse_raio(row: Mapping[str, Any]) -> RadiusTerritory:
    lat, lng, raio = row.get("base_latitude"), row.get("base_longitude"), row.get("raio_km")
    if lat is None or lng is None:
        raise InvalidTerritoryConfig("raio sem centro (base_latitude/base_longitude)")
    if raio is None:
        raise InvalidTerritoryConfig("raio sem raio_km")
    try:
        return RadiusTerritory(
            center=GeoPoint(float(lat), float(lng)),
            radius_km=float(raio),
            base_city=row.get("base_cidade"),
        )
    except (TypeError, ValueError) as e:
        raise InvalidTerritoryConfig(str(e))


# ============================================================
# 🔺 Polígono
# ============================================================
def parse_poligono(valor: Any) -> PolygonTerritory:
    dados = _carregar_json(valor)
    if isinstance(dados, Mapping):
        dados = dados.get("pontos")
    if not isinstance(dados, list):
        raise InvalidTerritoryConfig("poligono_pontos ausente ou não é lista")

    vertices = tuple(_ponto(p) for p in dados if isinstance(p, Mapping))
    try:
        return PolygonTerritory(vertices=vertices)
    except ValueError as e:
        raise InvalidTerritoryConfig(str(e))


# ============================================================
# 🧩 Múltiplas áreas
# ============================================================
def parse_areas(valor: Any, representante: str = "?") -> MultiAreaTerritory:
    dados = _carregar_json(valor)
    if not isinstance(dados, list):
        raise InvalidTerritoryConfig("areas_cobertura não é lista")

    areas: List[CoverageArea] = []
    for idx, raw in enumerate(dados):
        if not isinstance(raw, Mapping):
            logger.warning(f"⚠️ [TERRITORIO] {representante}: área #{idx} ignorada (formato inválido)")
            continue
        raio = raw.get("raioKm", raw.get("raio_km"))
        rotulo = raw.get("cidade") or raw.get("label") or raw.get("nome")
        try:
            if raio is None:
                raise InvalidTerritoryConfig("área sem raio")
            areas.append(CoverageArea(center=_ponto(raw), radius_km=float(raio), label=rotulo))
        except (TypeError, ValueError) as e:
            logger.warning(f"⚠️ [TERRITORIO] {representante}: área #{idx} ({rotulo}) ignorada: {e}")

    try:
        return MultiAreaTerritory(areas=tuple(areas))
    except ValueError as e:
        raise InvalidTerritoryConfig(str(e))


# ============================================================
# 🚦 Entrada principal
# ============================================================
def parse_territorio(row: Mapping[str, Any]) -> Territory:
    """
    Converte as colunas de território do representante no tipo soma.
    Áreas de cobertura não vazias têm precedência sobre territorio_tipo.
    """
    rep = f"{row.get('nome') or row.get('id')}"

    areas = _carregar_json(row.get("areas_cobertura"))
    if isinstance(areas, list) and areas:
        return parse_areas(areas, representante=rep)

    tipo = (row.get("territorio_tipo") or "").strip().lower()
    if tipo in TIPOS_RAIO:
        return parse_raio(row)
    if tipo in TIPOS_POLIGONO:
        return parse_poligono(row.get("poligono_pontos"))

    raise InvalidTerritoryConfig(f"tipo de território desconhecido: '{tipo}'")


def representante_from_row(row: Mapping[str, Any]) -> Representative:
    territorio: Optional[Territory] = None
    erro: Optional[str] = None

    try:
        territorio = parse_territorio(row)
    except InvalidTerritoryConfig as e:
        erro = str(e)
        logger.warning(
            f"⚠️ [TERRITORIO][INVALIDO] representante={row.get('id')} ({row.get('nome')}): {erro}"
        )

    return Representative(
        id=str(row["id"]),
        name=row.get("nome") or "",
        territory=territorio,
        active=bool(row.get("ativo", True)),
        territory_active=bool(row.get("territorio_ativo", True)),
        territory_error=erro,
    )


def representantes_from_rows(rows) -> Tuple[Representative, ...]:
    return tuple(representante_from_row(r) for r in rows)

import pytest

from territory_assignment.domain.entities import (
    CoverageArea,
    GeoPoint,
    MultiAreaTerritory,
    PolygonTerritory,
    RadiusTerritory,
)
from territory_assignment.domain.haversine_utils import haversine_km
from territory_assignment.domain.territory_matcher import (
    centro_poligono,
    matches,
    method_for,
    ponto_no_poligono,
)

from conftest import CAMPINAS, PAULISTA, SAO_PAULO_CENTRO, SOROCABA

QUADRADO_SP = (
    GeoPoint(-23.50, -46.70),
    GeoPoint(-23.50, -46.55),
    GeoPoint(-23.62, -46.55),
    GeoPoint(-23.62, -46.70),
)


@pytest.mark.parametrize("raio", [0.01, 1, 50, 500])
def test_radius_center_always_matches(raio):
    territorio = RadiusTerritory(center=SAO_PAULO_CENTRO, radius_km=raio)
    resultado = matches(SAO_PAULO_CENTRO, territorio)
    assert resultado.inside
    assert resultado.distance_km == 0


def test_radius_boundary():
    distancia = haversine_km(PAULISTA, SAO_PAULO_CENTRO)

    no_limite = matches(PAULISTA, RadiusTerritory(center=SAO_PAULO_CENTRO, radius_km=distancia))
    assert no_limite.inside
    assert no_limite.distance_km == distancia

    # ponto a raio + epsilon nunca casa
    fora = matches(PAULISTA, RadiusTerritory(center=SAO_PAULO_CENTRO, radius_km=distancia - 0.05))
    assert not fora.inside


def test_radius_label_is_base_city():
    territorio = RadiusTerritory(center=SOROCABA, radius_km=30, base_city="Sorocaba")
    assert matches(SOROCABA, territorio).label == "Sorocaba"


def test_polygon_centroid_of_convex_polygon_is_inside():
    territorio = PolygonTerritory(vertices=QUADRADO_SP)
    centro = centro_poligono(QUADRADO_SP)

    resultado = matches(centro, territorio)
    assert resultado.inside
    assert resultado.distance_km == 0


def test_polygon_outside_point_reports_centroid_distance():
    territorio = PolygonTerritory(vertices=QUADRADO_SP)
    resultado = matches(SOROCABA, territorio)
    assert not resultado.inside
    assert resultado.distance_km == haversine_km(SOROCABA, centro_poligono(QUADRADO_SP))


def test_polygon_concave_notch_is_outside():
    # "U" aberto para o norte: o entalhe não pertence ao polígono
    u = (
        GeoPoint(0, 0), GeoPoint(0, 3), GeoPoint(3, 3), GeoPoint(3, 2),
        GeoPoint(1, 2), GeoPoint(1, 1), GeoPoint(3, 1), GeoPoint(3, 0),
    )
    assert ponto_no_poligono(GeoPoint(0.5, 1.5), u)
    assert not ponto_no_poligono(GeoPoint(2, 1.5), u)


@pytest.mark.parametrize("ponto", [
    GeoPoint(-23.50, -46.62),
    GeoPoint(-23.56, -46.70),
    GeoPoint(-23.62, -46.55),
])
def test_polygon_edges_and_vertices_count_as_outside(ponto):
    assert not ponto_no_poligono(ponto, QUADRADO_SP)
    assert not matches(ponto, PolygonTerritory(vertices=QUADRADO_SP)).inside


def test_polygon_point_just_inside_edge():
    assert ponto_no_poligono(GeoPoint(-23.5001, -46.62), QUADRADO_SP)


def test_polygon_requires_three_vertices():
    with pytest.raises(ValueError):
        PolygonTerritory(vertices=QUADRADO_SP[:2])


def test_multi_area_first_match_wins_over_closer_area():
    ponto = GeoPoint(-23.5510, -46.6340)
    territorio = MultiAreaTerritory(areas=(
        CoverageArea(center=PAULISTA, radius_km=10, label="Paulista"),
        CoverageArea(center=SAO_PAULO_CENTRO, radius_km=10, label="Centro"),
    ))

    resultado = matches(ponto, territorio)
    assert resultado.inside
    assert resultado.label == "Paulista"
    assert resultado.distance_km == haversine_km(ponto, PAULISTA)
    assert method_for(territorio) == "multi-area"


def test_multi_area_outside_every_area():
    territorio = MultiAreaTerritory(areas=(
        CoverageArea(center=SOROCABA, radius_km=5, label="Sorocaba"),
        CoverageArea(center=CAMPINAS, radius_km=5, label="Campinas"),
    ))
    assert not matches(SAO_PAULO_CENTRO, territorio).inside


def test_method_for_each_variant():
    assert method_for(RadiusTerritory(center=SOROCABA, radius_km=1)) == "radius"
    assert method_for(PolygonTerritory(vertices=QUADRADO_SP)) == "polygon"


def test_unknown_territory_type_raises():
    with pytest.raises(TypeError):
        matches(SOROCABA, object())

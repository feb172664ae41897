from territory_assignment.application.assign_representante_service import (
    ERRO_SEM_COBERTURA,
    ERRO_SEM_COORDENADA,
    TerritoryAssignmentService,
)
from territory_assignment.domain.entities import (
    Address,
    AssignmentFailure,
    BusinessLocation,
    GeoPoint,
    PolygonTerritory,
    Representative,
)

from conftest import (
    CAMPINAS,
    PAULISTA,
    SAO_PAULO_CENTRO,
    SOROCABA,
    FakeGeocoder,
    FakeReader,
    FakeWriter,
    multi_rep,
    radius_rep,
)

PERTO_DA_SE = GeoPoint(-23.5520, -46.6350)


def _service(representantes, locais=(), pontos=None, com_writer=True):
    reader = FakeReader(representantes, locais)
    writer = FakeWriter(reader) if com_writer else None
    geocoder = FakeGeocoder(pontos or {})
    return TerritoryAssignmentService(reader, geocoder, writer), reader, writer, geocoder


def test_picks_closest_covering_representative_and_orders_alternates():
    service, *_ = _service([
        radius_rep("1", "Longe", PAULISTA, 20),
        radius_rep("2", "Perto", SAO_PAULO_CENTRO, 20),
        radius_rep("3", "Sorocaba", SOROCABA, 20),
        multi_rep("4", "Multi", [("Campinas", CAMPINAS, 10), ("Centro", GeoPoint(-23.545, -46.640), 15)]),
    ])

    resultado = service.preview(coordinate=PERTO_DA_SE)

    assert resultado.success
    assert resultado.representative_id == "2"
    assert resultado.method == "radius"
    ids_alternativos = [c.representative_id for c in resultado.alternates]
    assert "2" not in ids_alternativos
    assert "3" not in ids_alternativos
    distancias = [resultado.distance_km] + [c.distance_km for c in resultado.alternates]
    assert distancias == sorted(distancias)
    multi = next(c for c in resultado.alternates if c.representative_id == "4")
    assert (multi.method, multi.label) == ("multi-area", "Centro")


def test_tie_keeps_load_order():
    service, *_ = _service([
        radius_rep("1", "Primeiro", SAO_PAULO_CENTRO, 10),
        radius_rep("2", "Segundo", SAO_PAULO_CENTRO, 10),
    ])
    assert service.preview(coordinate=PERTO_DA_SE).representative_id == "1"


def test_polygon_representative():
    quadrado = (
        GeoPoint(-23.50, -46.70), GeoPoint(-23.50, -46.55),
        GeoPoint(-23.62, -46.55), GeoPoint(-23.62, -46.70),
    )
    service, *_ = _service([Representative(id="9", name="Poly", territory=PolygonTerritory(quadrado))])

    resultado = service.preview(coordinate=PERTO_DA_SE)
    assert resultado.method == "polygon"
    assert resultado.label is None


def test_no_coverage_does_not_touch_existing_assignment():
    local = BusinessLocation(id="L1", coordinate=CAMPINAS, assigned_representative_id="antigo")
    service, _, writer, _ = _service([radius_rep("1", "SP", SAO_PAULO_CENTRO, 5)], [local])

    resultado = service.atribuir_local("L1")

    assert not resultado.success
    assert resultado.error == ERRO_SEM_COBERTURA
    assert resultado.error_code == AssignmentFailure.NO_COVERAGE
    assert resultado.coordinate == CAMPINAS
    assert local.assigned_representative_id == "antigo"
    assert writer.atribuicoes == []


def test_inactive_representatives_are_skipped():
    service, *_ = _service([
        radius_rep("1", "Inativo", SAO_PAULO_CENTRO, 10, ativo=False),
        radius_rep("2", "Territorio off", SAO_PAULO_CENTRO, 10, territorio_ativo=False),
    ])
    assert service.preview(coordinate=PERTO_DA_SE).error_code == AssignmentFailure.NO_COVERAGE


def test_invalid_territory_is_reported_and_ignored():
    quebrado = Representative(id="5", name="Quebrado", territory=None, territory_error="tipo desconhecido")
    service, *_ = _service([quebrado, radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)])

    resultado = service.preview(coordinate=PERTO_DA_SE)

    assert resultado.representative_id == "1"
    assert resultado.ignored_representatives == ("5",)


def test_missing_address_data():
    service, _, _, geocoder = _service([radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)])

    resultado = service.preview(address=Address(street="Rua sem cidade"))

    assert resultado.error == ERRO_SEM_COORDENADA
    assert resultado.error_code == AssignmentFailure.NO_ADDRESS_DATA
    assert geocoder.chamadas == 0


def test_geocoding_failure():
    service, *_ = _service([radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)])

    resultado = service.preview(address=Address(city="Lugar Nenhum"))

    assert resultado.error == ERRO_SEM_COORDENADA
    assert resultado.error_code == AssignmentFailure.GEOCODING_UNAVAILABLE


def test_coordinate_is_cached_on_first_geocode():
    local = BusinessLocation(id="L1", name="Bar", address=Address(city="São Paulo"))
    service, _, writer, geocoder = _service(
        [radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)], [local], pontos={"São Paulo": PERTO_DA_SE}
    )

    service.assign(local)
    service.assign(local)

    assert geocoder.chamadas == 1
    assert local.coordinate == PERTO_DA_SE
    assert writer.coordenadas == [("L1", PERTO_DA_SE, "fake")]


def test_assign_is_idempotent():
    local = BusinessLocation(id="L1", coordinate=PERTO_DA_SE)
    service, *_ = _service([
        radius_rep("1", "A", SAO_PAULO_CENTRO, 10),
        radius_rep("2", "B", PAULISTA, 10),
    ], [local])

    assert service.assign(local) == service.assign(local)


def test_atribuir_local_persists_winner():
    local = BusinessLocation(id="L1", coordinate=PERTO_DA_SE)
    service, _, writer, _ = _service([radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)], [local])

    resultado = service.atribuir_local("L1")

    assert resultado.success
    assert local.assigned_representative_id == "1"
    assert local.assigned_at is not None
    assert [a[:2] for a in writer.atribuicoes] == [("L1", "1")]


def test_atribuir_local_without_persist_or_missing_location():
    local = BusinessLocation(id="L1", coordinate=PERTO_DA_SE)
    service, _, writer, _ = _service([radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)], [local])

    assert service.atribuir_local("L1", persistir=False).success
    assert writer.atribuicoes == []
    assert service.atribuir_local("nao-existe") is None


def test_result_serialization():
    service, *_ = _service([radius_rep("1", "SP", SAO_PAULO_CENTRO, 10)])
    dados = service.preview(address=Address(street="x")).to_dict()
    assert dados["success"] is False
    assert dados["error_code"] == "no_address_data"
    assert dados["alternates"] == []

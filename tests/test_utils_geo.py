import pytest

from territory_assignment.domain.entities import GeoPoint
from territory_assignment.domain.utils_geo import coordenada_generica, normalizar_cep

from conftest import SOROCABA


@pytest.mark.parametrize("cep", ["18030-310", "18030 310", "18.030-310", "CEP 18030-310", " 18030310 "])
def test_normalizar_cep_keeps_only_digits(cep):
    assert normalizar_cep(cep) == "18030310"


@pytest.mark.parametrize("cep", [None, "", "00000-000", "1803031", "18030-3100", "sem cep"])
def test_normalizar_cep_rejects_malformed(cep):
    assert normalizar_cep(cep) is None


@pytest.mark.parametrize("ponto", [
    GeoPoint(0, 0),
    GeoPoint(-14.235004, -51.92528),
    GeoPoint(-14.27, -51.95),
])
def test_generic_points(ponto):
    assert coordenada_generica(ponto)


def test_real_city_is_not_generic():
    assert not coordenada_generica(SOROCABA)

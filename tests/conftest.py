from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from territory_assignment.domain.entities import (
    BusinessLocation,
    CoverageArea,
    GeocodeHit,
    GeoPoint,
    MultiAreaTerritory,
    RadiusTerritory,
    Representative,
)

SAO_PAULO_CENTRO = GeoPoint(-23.5505, -46.6333)
PAULISTA = GeoPoint(-23.5619, -46.6563)
SOROCABA = GeoPoint(-23.5015, -47.4526)
CAMPINAS = GeoPoint(-22.9099, -47.0626)


class FakeReader:
    def __init__(self, representantes=(), locais=(), status: Optional[Dict[str, bool]] = None):
        self.representantes = list(representantes)
        self.locais = {loc.id: loc for loc in locais}
        self.status = status
        self.listagens = 0

    def listar_representantes(self):
        self.listagens += 1
        return [r for r in self.representantes if r.active and r.territory_active]

    def buscar_representante(self, representante_id):
        return next((r for r in self.representantes if r.id == representante_id), None)

    def mapa_status_representantes(self):
        if self.status is not None:
            return dict(self.status)
        return {r.id: r.active for r in self.representantes}

    def buscar_local(self, local_id):
        return self.locais.get(local_id)

    def listar_locais(self):
        return list(self.locais.values())

    def listar_locais_sem_representante(self):
        return [loc for loc in self.locais.values() if loc.assigned_representative_id is None]

    def listar_locais_sem_coordenadas(self):
        return [loc for loc in self.locais.values() if loc.coordinate is None]


class FakeWriter:
    def __init__(self, reader: Optional[FakeReader] = None, falhar: bool = False):
        self.reader = reader
        self.falhar = falhar
        self.coordenadas: List[tuple] = []
        self.atribuicoes: List[tuple] = []
        self.notificacoes: List[tuple] = []

    def salvar_coordenadas(self, local_id, ponto, fonte):
        self.coordenadas.append((local_id, ponto, fonte))
        return not self.falhar

    def salvar_atribuicao(self, local_id, representante_id, atribuido_em):
        if self.falhar:
            return False
        self.atribuicoes.append((local_id, representante_id, atribuido_em))
        if self.reader is not None and local_id in self.reader.locais:
            self.reader.locais[local_id].assigned_representative_id = representante_id
        return True

    def criar_notificacao(self, titulo, mensagem, tipo="assignment", severidade="info"):
        self.notificacoes.append((titulo, mensagem))
        return True


class FakeGeocoder:
    """Mapa cidade -> ponto; conta chamadas."""

    name = "fake"

    def __init__(self, pontos: Optional[Dict[str, GeoPoint]] = None):
        self.pontos = pontos or {}
        self.chamadas = 0

    def resolver(self, address):
        self.chamadas += 1
        ponto = self.pontos.get(address.city)
        return GeocodeHit(ponto, "fake") if ponto else None

    def geocode(self, address):
        hit = self.resolver(address)
        return hit.point if hit else None


class FakeCursor:
    def __init__(self, provider):
        self.provider = provider
        self.rowcount = provider.rowcount
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=()):
        self.provider.executados.append((" ".join(sql.split()), params))
        if self.provider.erro is not None:
            raise self.provider.erro
        self._rows = self.provider.resultados.pop(0) if self.provider.resultados else []

    def fetchall(self):
        return self._rows

    def fetchone(self):
        return self._rows[0] if self._rows else None


class FakeConnection:
    def __init__(self, provider):
        self.provider = provider

    def cursor(self, cursor_factory=None):
        return FakeCursor(self.provider)


class FakeProvider:
    """Substitui o ConnectionProvider: uma lista de linhas por execute()."""

    def __init__(self, resultados=(), rowcount=1, erro=None):
        self.resultados = [list(r) for r in resultados]
        self.rowcount = rowcount
        self.erro = erro
        self.executados = []
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def connection(self):
        try:
            yield FakeConnection(self)
            self.commits += 1
        except Exception:
            self.rollbacks += 1
            raise


def radius_rep(rep_id, nome, centro, raio, ativo=True, territorio_ativo=True):
    return Representative(
        id=rep_id,
        name=nome,
        territory=RadiusTerritory(center=centro, radius_km=raio, base_city=nome),
        active=ativo,
        territory_active=territorio_ativo,
    )


def multi_rep(rep_id, nome, areas):
    return Representative(
        id=rep_id,
        name=nome,
        territory=MultiAreaTerritory(
            areas=tuple(CoverageArea(center=c, radius_km=r, label=label) for label, c, r in areas)
        ),
    )


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2026, 1, 15, 10, 30)

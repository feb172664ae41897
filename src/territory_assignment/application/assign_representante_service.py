# ============================================================
# 📦 src/territory_assignment/application/assign_representante_service.py
# ============================================================

from datetime import datetime
from typing import List, Optional

from loguru import logger

from territory_assignment.domain.entities import (
    Address,
    AssignmentCandidate,
    AssignmentFailure,
    AssignmentResult,
    BusinessLocation,
    GeoPoint,
)
from territory_assignment.domain.territory_matcher import matches, method_for

ERRO_SEM_COORDENADA = "no coordinate"
ERRO_SEM_COBERTURA = "outside all coverage areas"
ERRO_SEM_REPRESENTANTES = "representatives unavailable"


class TerritoryAssignmentService:
    """
    Atribuição geográfica de um local ao representante mais próximo
    cujo território o contém.

    Dependências injetadas:
      - reader: listar_representantes(), buscar_local(id)
      - geocoder: resolver(address) -> GeocodeHit | None
      - writer (opcional): salvar_coordenadas(...), salvar_atribuicao(...)

    Sem estado entre chamadas: a lista de representantes é um snapshot
    tirado no início de cada assign().
    """

    def __init__(self, reader, geocoder, writer=None):
        self.reader = reader
        self.geocoder = geocoder
        self.writer = writer

    # =========================================================
    # 1️⃣ Coordenada (cache -> geocoder)
    # =========================================================
    def _resolver_coordenada(self, location: BusinessLocation):
        if location.coordinate is not None:
            return location.coordinate, None

        if not location.address.has_locality:
            logger.warning(f"⚠️ [ATRIBUICAO] local={location.id}: endereço sem cidade/CEP")
            return None, AssignmentFailure.NO_ADDRESS_DATA

        hit = self.geocoder.resolver(location.address)
        if hit is None:
            logger.warning(f"⚠️ [ATRIBUICAO] local={location.id}: geocodificação indisponível")
            return None, AssignmentFailure.GEOCODING_UNAVAILABLE

        # cache idempotente no próprio registro
        location.coordinate = hit.point
        if self.writer is not None and location.id is not None:
            self.writer.salvar_coordenadas(location.id, hit.point, hit.source)

        return hit.point, None

    # =========================================================
    # 🎯 Operação principal
    # =========================================================
    def assign(self, location: BusinessLocation) -> AssignmentResult:
        ponto, falha = self._resolver_coordenada(location)
        if ponto is None:
            return AssignmentResult.failure(ERRO_SEM_COORDENADA, falha)

        representantes = self.reader.listar_representantes()
        if representantes is None:
            logger.error(f"🚨 [ATRIBUICAO] local={location.id}: representantes indisponíveis (banco)")
            return AssignmentResult.failure(
                ERRO_SEM_REPRESENTANTES,
                AssignmentFailure.REPRESENTATIVES_UNAVAILABLE,
                coordinate=ponto,
            )

        candidatos: List[AssignmentCandidate] = []
        ignorados: List[str] = []

        for rep in representantes:
            if not (rep.active and rep.territory_active):
                continue
            if rep.territory is None:
                logger.warning(
                    f"⚠️ [ATRIBUICAO] representante {rep.id} ({rep.name}) ignorado: "
                    f"{AssignmentFailure.INVALID_TERRITORY_CONFIG.value} - {rep.territory_error}"
                )
                ignorados.append(rep.id)
                continue

            resultado = matches(ponto, rep.territory)
            if resultado.inside:
                candidatos.append(
                    AssignmentCandidate(
                        representative_id=rep.id,
                        representative_name=rep.name,
                        distance_km=resultado.distance_km,
                        method=method_for(rep.territory),
                        label=resultado.label,
                    )
                )

        if not candidatos:
            logger.info(
                f"📭 [ATRIBUICAO] local={location.id} fora de todas as áreas "
                f"({ponto.latitude:.5f}, {ponto.longitude:.5f})"
            )
            return AssignmentResult.failure(
                ERRO_SEM_COBERTURA,
                AssignmentFailure.NO_COVERAGE,
                coordinate=ponto,
                ignored=tuple(ignorados),
            )

        # sort estável: empates ficam na ordem de carga (id)
        candidatos.sort(key=lambda c: c.distance_km)
        escolhido = candidatos[0]

        logger.info(
            f"✅ [ATRIBUICAO] local={location.id} -> {escolhido.representative_name} "
            f"({escolhido.distance_km} km, {escolhido.method}) | alternativas={len(candidatos) - 1}"
        )

        return AssignmentResult(
            success=True,
            representative_id=escolhido.representative_id,
            representative_name=escolhido.representative_name,
            distance_km=escolhido.distance_km,
            method=escolhido.method,
            label=escolhido.label,
            alternates=tuple(candidatos[1:]),
            coordinate=ponto,
            ignored_representatives=tuple(ignorados),
        )

    # =========================================================
    # 💾 Atribuição persistida de um local do banco
    # =========================================================
    def atribuir_local(self, local_id: str, persistir: bool = True) -> Optional[AssignmentResult]:
        """None quando o local não existe."""
        location = self.reader.buscar_local(local_id)
        if location is None:
            logger.warning(f"⚠️ [ATRIBUICAO] local {local_id} não encontrado")
            return None

        resultado = self.assign(location)

        if resultado.success and persistir and self.writer is not None:
            agora = datetime.now()
            if self.writer.salvar_atribuicao(location.id, resultado.representative_id, agora):
                location.assigned_representative_id = resultado.representative_id
                location.assigned_at = agora

        return resultado

    # =========================================================
    # 👁️ Pré-visualização (sem persistência)
    # =========================================================
    def preview(self, address: Optional[Address] = None, coordinate: Optional[GeoPoint] = None) -> AssignmentResult:
        location = BusinessLocation(id=None, address=address or Address(), coordinate=coordinate)
        return self.assign(location)

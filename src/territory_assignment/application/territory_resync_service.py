# ============================================================
# 📦 src/territory_assignment/application/territory_resync_service.py
# ============================================================

import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from territory_assignment.application.assign_representante_service import TerritoryAssignmentService
from territory_assignment.domain.address_normalizer import corresponde_a_algum, somente_digitos
from territory_assignment.domain.entities import AssignmentFailure, AssignmentResult, BusinessLocation


@dataclass
class ResumoLote:
    total: int = 0
    atribuidos: int = 0
    reatribuidos: int = 0
    mantidos: int = 0
    nao_atribuidos: int = 0
    ignorados_inativos: int = 0
    erros: int = 0
    detalhes: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "atribuidos": self.atribuidos,
            "reatribuidos": self.reatribuidos,
            "mantidos": self.mantidos,
            "nao_atribuidos": self.nao_atribuidos,
            "ignorados_inativos": self.ignorados_inativos,
            "erros": self.erros,
            "detalhes": self.detalhes,
        }


ALVO_CEP = re.compile(r"\d{5}-?\d{0,3}")


def _falha_de_infra(resultado: AssignmentResult) -> bool:
    return resultado.error_code == AssignmentFailure.REPRESENTATIVES_UNAVAILABLE


def alvos_cep(alvos: Sequence[str]) -> List[str]:
    """Só alvos com formato de CEP (prefixo de 5 a 8 dígitos), já sem hífen."""
    return [somente_digitos(a) for a in alvos if a and ALVO_CEP.fullmatch(a.strip())]


def local_corresponde_alvos(location: BusinessLocation, alvos: Sequence[str]) -> bool:
    """
    Bairro bate com algum alvo (substring, qualquer direção, após normalizar)
    ou o CEP do local começa com algum alvo em formato de CEP.
    """
    if corresponde_a_algum(location.address.neighborhood, alvos):
        return True

    cep = somente_digitos(location.address.postal_code)
    if not cep:
        return False
    return any(cep.startswith(prefixo) for prefixo in alvos_cep(alvos))


class TerritoryResyncService:
    """
    Operações em lote sobre a atribuição.

    O ritmo é responsabilidade de quem chama: `pausa` segundos entre
    atribuições (limite da API de geocodificação). Sem fila nem workers.
    """

    def __init__(
        self,
        assignment: TerritoryAssignmentService,
        reader,
        writer,
        pausa: float = 1.1,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.assignment = assignment
        self.reader = reader
        self.writer = writer
        self.pausa = pausa
        self.sleep = sleep
        self.clock = clock

    def _pausar(self, idx: int):
        if idx > 0 and self.pausa > 0:
            self.sleep(self.pausa)

    # =========================================================
    # 1️⃣ Importação (lista de locais recém-criados)
    # =========================================================
    def atribuir_em_lote(self, locais: Iterable[BusinessLocation], persistir: bool = True) -> ResumoLote:
        locais = list(locais)
        resumo = ResumoLote(total=len(locais))
        logger.info(f"📥 [LOTE] Atribuição de {len(locais)} locais importados")

        for idx, local in enumerate(locais):
            self._pausar(idx)
            nome = local.name or local.id

            resultado = self.assignment.assign(local)
            if not resultado.success:
                if _falha_de_infra(resultado):
                    resumo.erros += 1
                else:
                    resumo.nao_atribuidos += 1
                resumo.detalhes.append({"local": nome, "erro": resultado.error})
                continue

            if persistir and local.id is not None:
                if not self.writer.salvar_atribuicao(local.id, resultado.representative_id, self.clock()):
                    resumo.erros += 1
                    resumo.detalhes.append({"local": nome, "erro": "falha ao persistir atribuição"})
                    continue

            resumo.atribuidos += 1
            resumo.detalhes.append({
                "local": nome,
                "representante": resultado.representative_name,
                "distancia_km": resultado.distance_km,
                "metodo": resultado.method,
            })

        logger.info(
            f"🏁 [LOTE] atribuídos={resumo.atribuidos} | não atribuídos={resumo.nao_atribuidos} | erros={resumo.erros}"
        )
        return resumo

    # =========================================================
    # 2️⃣ Território editado: reclamar locais sem dono por bairro/CEP
    # =========================================================
    def reclamar_por_alvos(self, representante_id: str, alvos: Sequence[str]) -> ResumoLote:
        alvos = [a for a in (alvos or []) if a and a.strip()]
        resumo = ResumoLote()
        if not alvos:
            return resumo

        representante = self.reader.buscar_representante(representante_id)
        if representante is None or not representante.active:
            logger.warning(f"⚠️ [RECLAMAR] representante {representante_id} inexistente ou inativo")
            return resumo

        candidatos = [
            loc for loc in self.reader.listar_locais_sem_representante()
            if local_corresponde_alvos(loc, alvos)
        ]
        resumo.total = len(candidatos)
        logger.info(
            f"🧭 [RECLAMAR] {representante.name}: {len(candidatos)} locais sem representante nos alvos {alvos}"
        )

        for idx, local in enumerate(candidatos):
            self._pausar(idx)
            self._atribuir_sem_dono(local, resumo)

        if resumo.atribuidos:
            self.writer.criar_notificacao(
                titulo="Clientes Atribuídos Automaticamente",
                mensagem=(
                    f"{resumo.atribuidos} clientes foram atribuídos automaticamente "
                    f"com base em: {', '.join(alvos)}"
                ),
            )
        return resumo

    # =========================================================
    # 3️⃣ Re-sync geral
    # =========================================================
    def reatribuir(self, reatribuir_existentes: bool = False) -> ResumoLote:
        """
        Sem `reatribuir_existentes` só locais sem dono são tocados.
        Locais de representantes inativos nunca são tocados, e uma
        falha de atribuição nunca remove a atribuição existente.
        """
        if reatribuir_existentes:
            locais = list(self.reader.listar_locais())
            status = self.reader.mapa_status_representantes()
        else:
            locais = list(self.reader.listar_locais_sem_representante())
            status = {}

        resumo = ResumoLote(total=len(locais))
        logger.info(f"🔄 [RESYNC] {len(locais)} locais | reatribuir_existentes={reatribuir_existentes}")

        chamadas = 0
        for local in locais:
            atual = local.assigned_representative_id

            if atual is None:
                self._pausar(chamadas)
                chamadas += 1
                self._atribuir_sem_dono(local, resumo)
                continue

            if not status.get(atual, False):
                resumo.ignorados_inativos += 1
                continue

            self._pausar(chamadas)
            chamadas += 1
            resultado = self.assignment.assign(local)

            if not resultado.success:
                if _falha_de_infra(resultado):
                    resumo.erros += 1
                else:
                    resumo.mantidos += 1
                resumo.detalhes.append({"local": local.name or local.id, "erro": resultado.error})
                continue

            if resultado.representative_id == atual:
                resumo.mantidos += 1
                continue

            if self.writer.salvar_atribuicao(local.id, resultado.representative_id, self.clock()):
                resumo.reatribuidos += 1
                resumo.detalhes.append({
                    "local": local.name or local.id,
                    "de": atual,
                    "para": resultado.representative_id,
                    "distancia_km": resultado.distance_km,
                })
            else:
                resumo.erros += 1

        logger.info(
            f"🏁 [RESYNC] atribuídos={resumo.atribuidos} | reatribuídos={resumo.reatribuidos} | "
            f"mantidos={resumo.mantidos} | sem atribuição={resumo.nao_atribuidos} | "
            f"inativos ignorados={resumo.ignorados_inativos} | erros={resumo.erros}"
        )
        return resumo

    # =========================================================
    # 🔧 Interno
    # =========================================================
    def _atribuir_sem_dono(self, local: BusinessLocation, resumo: ResumoLote) -> Optional[str]:
        resultado = self.assignment.assign(local)

        if not resultado.success:
            if _falha_de_infra(resultado):
                resumo.erros += 1
            else:
                resumo.nao_atribuidos += 1
            if resultado.error_code != AssignmentFailure.NO_COVERAGE:
                resumo.detalhes.append({"local": local.name or local.id, "erro": resultado.error})
            return None

        if self.writer.salvar_atribuicao(local.id, resultado.representative_id, self.clock()):
            resumo.atribuidos += 1
            resumo.detalhes.append({
                "local": local.name or local.id,
                "representante": resultado.representative_name,
                "distancia_km": resultado.distance_km,
                "metodo": resultado.method,
            })
            return resultado.representative_id

        resumo.erros += 1
        return None

# ============================================================
# 📦 src/territory_assignment/application/coordinate_population_service.py
# ============================================================

from typing import Dict

from loguru import logger

from territory_assignment.domain.cep_estimator import CepEstimator


class CoordinatePopulationService:
    """
    Preenche coordenadas ausentes usando apenas a estimativa estática
    por CEP/cidade (sem rede). Útil para mapas antes da geocodificação real.
    """

    def __init__(self, reader, writer, estimator: CepEstimator = None):
        self.reader = reader
        self.writer = writer
        self.estimator = estimator or CepEstimator()

    def popular_coordenadas(self) -> Dict[str, int]:
        locais = list(self.reader.listar_locais_sem_coordenadas())
        logger.info(f"📍 Encontrados {len(locais)} locais sem coordenadas")

        stats = {"total": len(locais), "atualizados": 0, "sem_estimativa": 0, "erros": 0}

        for local in locais:
            hit = self.estimator.resolver(local.address)
            if hit is None:
                stats["sem_estimativa"] += 1
                logger.debug(f"⚠️ {local.name or local.id}: sem coordenadas estimáveis")
                continue

            if self.writer.salvar_coordenadas(local.id, hit.point, hit.source):
                stats["atualizados"] += 1
                logger.debug(
                    f"✅ {local.name or local.id}: {hit.point.latitude:.4f}, {hit.point.longitude:.4f} ({hit.source})"
                )
            else:
                stats["erros"] += 1

        logger.info(
            f"✨ {stats['atualizados']}/{stats['total']} locais atualizados "
            f"(sem estimativa: {stats['sem_estimativa']}, erros: {stats['erros']})"
        )
        return stats

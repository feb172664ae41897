# ============================================================
# 📦 src/territory_assignment/bootstrap.py
# ============================================================

from dataclasses import dataclass

import requests
from loguru import logger

from database.db_connection import ConnectionProvider
from territory_assignment.application.assign_representante_service import TerritoryAssignmentService
from territory_assignment.application.coordinate_population_service import CoordinatePopulationService
from territory_assignment.application.territory_resync_service import TerritoryResyncService
from territory_assignment.config.settings import Settings
from territory_assignment.domain.cep_estimator import CepEstimator
from territory_assignment.infrastructure.database_reader import DatabaseReader
from territory_assignment.infrastructure.database_writer import DatabaseWriter
from territory_assignment.infrastructure.distance_matrix_service import DistanceMatrixService
from territory_assignment.infrastructure.feature_probe import detectar_recursos
from territory_assignment.infrastructure.google_geocoder import GeocodingChain, GoogleGeocoder


@dataclass
class Servicos:
    provider: ConnectionProvider
    session: requests.Session
    assignment: TerritoryAssignmentService
    resync: TerritoryResyncService
    population: CoordinatePopulationService
    distance: DistanceMatrixService

    def close(self):
        self.session.close()
        self.provider.close()


def build_services(settings: Settings) -> Servicos:
    """Monta pool, sessão HTTP e serviços uma única vez (API/CLI)."""
    provider = ConnectionProvider(settings.db_params, settings.db_pool_min, settings.db_pool_max)
    recursos = detectar_recursos(provider)

    reader = DatabaseReader(provider)
    writer = DatabaseWriter(provider, recursos)

    session = requests.Session()
    google = GoogleGeocoder(
        api_key=settings.google_maps_api_key,
        session=session,
        timeout=settings.geocoding_timeout,
        region=settings.geocoding_region,
    )
    geocoders = [google, CepEstimator()] if settings.usar_estimativa_cep else [google]

    assignment = TerritoryAssignmentService(reader, GeocodingChain(geocoders), writer)

    logger.info(
        f"⚙️ Serviços de território prontos | google={'on' if settings.google_maps_api_key else 'off'} "
        f"| estimativa_cep={settings.usar_estimativa_cep} | pausa_resync={settings.resync_pausa}s"
    )

    return Servicos(
        provider=provider,
        session=session,
        assignment=assignment,
        resync=TerritoryResyncService(assignment, reader, writer, pausa=settings.resync_pausa),
        population=CoordinatePopulationService(reader, writer),
        distance=DistanceMatrixService(
            api_key=settings.google_maps_api_key,
            session=session,
            timeout=settings.geocoding_timeout,
            region=settings.geocoding_region,
            batch_size=settings.distance_matrix_batch_size,
            pausa_entre_lotes=settings.distance_matrix_pausa,
        ),
    )

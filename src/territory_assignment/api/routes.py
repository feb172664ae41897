# ==========================================================
# 📦 src/territory_assignment/api/routes.py
# ==========================================================

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from pydantic import BaseModel, Field, model_validator

from database.db_connection import verificar_conexao
from territory_assignment.api.dependencies import get_servicos, require_admin, verify_token
from territory_assignment.domain.address_normalizer import address_from_raw
from territory_assignment.domain.entities import GeoPoint
from territory_assignment.domain.haversine_utils import haversine_km

router = APIRouter()


# ==========================================================
# 📌 Schemas
# ==========================================================
class CoordenadaSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PreviewRequest(BaseModel):
    endereco: Optional[dict] = None
    coordenada: Optional[CoordenadaSchema] = None

    @model_validator(mode="after")
    def _endereco_ou_coordenada(self):
        if self.endereco is None and self.coordenada is None:
            raise ValueError("Informe endereco ou coordenada.")
        return self


class ReclamarRequest(BaseModel):
    alvos: List[str] = Field(..., min_length=1, description="Bairros ou CEPs recém-cobertos")


class ReatribuirRequest(BaseModel):
    reatribuir_existentes: bool = False


# ==========================================================
# 🧪 Health check (sem autenticação)
# ==========================================================
@router.get("/health", tags=["Status"])
def health_check(servicos=Depends(get_servicos)):
    banco_ok = verificar_conexao(servicos.provider)
    return {
        "status": "ok" if banco_ok else "degraded",
        "service": "territory_assignment",
        "database": banco_ok,
    }


# ==========================================================
# 🎯 Atribuir um local
# ==========================================================
@router.post("/locais/{local_id}/atribuir", dependencies=[Depends(verify_token)], tags=["Atribuição"])
def atribuir_local(
    request: Request,
    local_id: str,
    persistir: bool = Query(True),
    servicos=Depends(get_servicos),
):
    resultado = servicos.assignment.atribuir_local(local_id, persistir=persistir)
    if resultado is None:
        raise HTTPException(status_code=404, detail="Local não encontrado.")

    logger.info(
        f"🎯 {request.state.user['email']} atribuiu local {local_id} | sucesso={resultado.success}"
    )
    return resultado.to_dict()


# ==========================================================
# 👁️ Pré-visualização (sem persistir)
# ==========================================================
@router.post("/preview", dependencies=[Depends(verify_token)], tags=["Atribuição"])
def preview(payload: PreviewRequest, servicos=Depends(get_servicos)):
    coordenada = (
        GeoPoint(payload.coordenada.latitude, payload.coordenada.longitude)
        if payload.coordenada else None
    )
    resultado = servicos.assignment.preview(
        address=address_from_raw(payload.endereco),
        coordinate=coordenada,
    )
    return resultado.to_dict()


# ==========================================================
# 🧭 Território editado -> reclamar locais sem dono
# ==========================================================
@router.post(
    "/representantes/{representante_id}/reclamar",
    dependencies=[Depends(verify_token), Depends(require_admin)],
    tags=["Re-sync"],
)
def reclamar(representante_id: str, payload: ReclamarRequest, servicos=Depends(get_servicos)):
    resumo = servicos.resync.reclamar_por_alvos(representante_id, payload.alvos)
    return resumo.to_dict()


# ==========================================================
# 🔄 Re-sync geral
# ==========================================================
@router.post("/reatribuir", dependencies=[Depends(verify_token), Depends(require_admin)], tags=["Re-sync"])
def reatribuir(payload: ReatribuirRequest, servicos=Depends(get_servicos)):
    resumo = servicos.resync.reatribuir(reatribuir_existentes=payload.reatribuir_existentes)
    return resumo.to_dict()


# ==========================================================
# 📏 Distância (Haversine + rota real opcional)
# ==========================================================
@router.get("/distancia", dependencies=[Depends(verify_token)], tags=["Distância"])
def distancia(
    origem_lat: float = Query(..., ge=-90, le=90),
    origem_lon: float = Query(..., ge=-180, le=180),
    destino_lat: float = Query(..., ge=-90, le=90),
    destino_lon: float = Query(..., ge=-180, le=180),
    rota_real: bool = Query(False),
    modo: Literal["driving", "walking", "bicycling", "transit"] = Query("driving"),
    servicos=Depends(get_servicos),
):
    origem = GeoPoint(origem_lat, origem_lon)
    destino = GeoPoint(destino_lat, destino_lon)

    resposta = {"haversine_km": haversine_km(origem, destino), "rota": None}

    if rota_real:
        rota = servicos.distance.real_route_km(origem, destino, mode=modo)
        if rota is not None:
            resposta["rota"] = {"distance_km": rota.distance_km, "duration_minutes": rota.duration_minutes}

    return resposta

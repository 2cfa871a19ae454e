from fastapi import APIRouter, Depends, HTTPException, status, Query, Body
from typing import Optional
from pydantic import BaseModel

from app.api.localizacao.adapters.nominatim_adapter import NominatimAdapter
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.exceptions import EnderecoMascaradoError, GeocodificacaoError
from app.api.localizacao.models.coordenadas import ResultadoDistancia
from app.api.localizacao.models.resultado_cep import ResultadoCep
from app.api.localizacao.services.service_cep import CepService
from app.api.localizacao.services.dependencies import get_cep_service, get_distancia_service, get_nominatim_adapter
from app.utils.logger import logger


router = APIRouter(
    prefix="/api/localizacao",
    tags=["Localização"]
)


class CalcularDistanciaRequest(BaseModel):
    origem: str
    destino: str
    cidade: Optional[str] = None
    estado: Optional[str] = None


@router.get("/cep/{cep}", response_model=ResultadoCep, status_code=status.HTTP_200_OK)
async def buscar_cep(
    cep: str,
    cep_service: CepService = Depends(get_cep_service),
):
    """
    Busca rua e bairro pelo CEP.

    CEP não encontrado ou ViaCEP fora do ar não são erro: o resultado volta com
    `encontrado=false` e um aviso para preenchimento manual.
    """
    logger.info(f"[Localizacao] Buscando CEP: {cep}")
    return await cep_service.buscar(cep)


@router.post("/calcular-distancia", response_model=ResultadoDistancia, status_code=status.HTTP_200_OK)
async def calcular_distancia(
    payload: CalcularDistanciaRequest = Body(...),
    distancia_service: IDistanciaService = Depends(get_distancia_service),
):
    """
    Calcula a distância em linha reta entre dois endereços em texto livre.

    Endereços mascarados (`*` ou `...`) são recusados sem consultar o provedor.
    """
    try:
        return await distancia_service.calcular_distancia(
            payload.origem, payload.destino, cidade=payload.cidade, estado=payload.estado
        )
    except EnderecoMascaradoError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except GeocodificacaoError as e:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, str(e))


@router.delete("/cache", status_code=status.HTTP_200_OK)
def limpar_cache(
    consulta: Optional[str] = Query(None, description="Consulta específica para limpar, ou None para limpar tudo"),
    adapter: NominatimAdapter = Depends(get_nominatim_adapter),
):
    """Limpa o cache de coordenadas geocodificadas."""
    adapter.cache.clear(consulta)
    return {
        "message": f"Cache limpo: {'consulta específica' if consulta else 'tudo'}",
        "consulta": consulta
    }

from fastapi import APIRouter, Body, Depends, status

from app.api.checkout.schemas.schema_endereco import ResultadoTaxa
from app.api.checkout.schemas.schema_requests import (
    CalcularTaxaRequest,
    CalcularTaxaResponse,
    CotarTaxaRequest,
    FaixasRequest,
    FaixasResponse,
)
from app.api.checkout.services.dependencies import get_taxa_entrega_service
from app.api.checkout.services.service_taxa_entrega import (
    TaxaEntregaService,
    calcular_taxa,
    formatar_faixas,
    taxa_minima,
)
from app.utils.logger import logger

router = APIRouter(prefix="/api/checkout/public/taxas", tags=["Public - Taxas de Entrega"])


@router.post("/faixas", response_model=FaixasResponse, status_code=status.HTTP_200_OK)
def descrever_faixas(payload: FaixasRequest = Body(...)):
    """Faixas ordenadas e descritas para exibição, com a taxa mínima."""
    return FaixasResponse(
        descricoes=formatar_faixas(payload.faixas),
        taxa_minima=taxa_minima(payload.faixas),
    )


@router.post("/calcular", response_model=CalcularTaxaResponse, status_code=status.HTTP_200_OK)
def calcular(payload: CalcularTaxaRequest = Body(...)):
    """Taxa para uma distância conhecida. Sem distância vale a taxa mínima."""
    if payload.distancia_metros is None:
        return CalcularTaxaResponse(valor=taxa_minima(payload.faixas), taxa_minima=True)
    return CalcularTaxaResponse(valor=calcular_taxa(payload.distancia_metros, payload.faixas))


@router.post("/cotar", response_model=ResultadoTaxa, status_code=status.HTTP_200_OK)
async def cotar(
    payload: CotarTaxaRequest = Body(...),
    taxa_service: TaxaEntregaService = Depends(get_taxa_entrega_service),
):
    """
    Resolve a taxa de um endereço com a mesma ordem de prioridade do checkout:
    distância do cliente, do local de retirada, geocodificação e taxa mínima.
    """
    logger.info(f"[TaxaEntrega] Cotando taxa para restaurante {payload.restaurante.id}")
    return await taxa_service.resolver_taxa(payload.endereco, payload.restaurante)

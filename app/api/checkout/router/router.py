"""
Router principal do contexto de Checkout.
"""
from fastapi import APIRouter

from app.api.checkout.router.client.router_checkout_client import router as router_checkout_client
from app.api.checkout.router.public.router_taxas_public import router as router_taxas_public

api_checkout = APIRouter(
    tags=["API - Checkout"]
)

# Router client (fluxo cadastro -> checkout -> pagamento)
api_checkout.include_router(router_checkout_client)

# Router public (taxas de entrega)
api_checkout.include_router(router_taxas_public)

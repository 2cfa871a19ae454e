"""
Router de monitoramento: métricas Prometheus.
"""
from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.utils.prometheus_metrics import CONTENT_TYPE_LATEST, get_metrics

router_public = APIRouter(
    prefix="/api/monitoring",
    tags=["Monitoring - Monitoramento"]
)


@router_public.get("/metrics")
async def metrics():
    """
    Endpoint de métricas Prometheus (público, sem autenticação).
    Acesse em: /api/monitoring/metrics
    """
    return StreamingResponse(
        iter([get_metrics()]),
        media_type=CONTENT_TYPE_LATEST
    )

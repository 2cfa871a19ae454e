"""
Métricas Prometheus da API de checkout.
"""
import re
from time import time
from typing import Callable

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Métricas de requisições HTTP
http_requests_total = Counter(
    'checkout_http_requests_total',
    'Total de requisições HTTP',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'checkout_http_request_duration_seconds',
    'Duração das requisições HTTP em segundos',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0]
)

active_connections = Gauge(
    'checkout_active_connections',
    'Número de conexões ativas'
)

log_messages_total = Counter(
    'checkout_log_messages_total',
    'Total de mensagens de log',
    ['level']
)

# Métricas de negócio
pedidos_criados_total = Counter(
    'checkout_pedidos_criados_total',
    'Pedidos criados no backend',
    ['forma_pagamento']
)

falhas_criacao_pedido_total = Counter(
    'checkout_falhas_criacao_pedido_total',
    'Falhas na criação de pedido',
    ['forma_pagamento']
)

taxa_entrega_origem_total = Counter(
    'checkout_taxa_entrega_origem_total',
    'Taxas de entrega calculadas por origem da distância',
    ['origem']
)

geocodificacoes_total = Counter(
    'checkout_geocodificacoes_total',
    'Requisições ao provedor de geocodificação',
    ['resultado']
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware para coletar métricas Prometheus das requisições HTTP."""

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path.endswith("/metrics"):
            return await call_next(request)

        method = request.method
        endpoint = self._normalize_endpoint(request.url.path)

        start_time = time()
        active_connections.inc()
        try:
            response = await call_next(request)
            http_requests_total.labels(method=method, endpoint=endpoint, status_code=response.status_code).inc()
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(time() - start_time)
            return response
        except Exception:
            http_requests_total.labels(method=method, endpoint=endpoint, status_code=500).inc()
            raise
        finally:
            active_connections.dec()

    def _normalize_endpoint(self, endpoint: str) -> str:
        """
        Normaliza endpoints removendo IDs para evitar alta cardinalidade.
        Ex: /api/checkout/client/checkouts/3f2a... -> /api/checkout/client/checkouts/{id}
        """
        endpoint = re.sub(r'/[0-9a-f]{32}', '/{id}', endpoint)
        endpoint = re.sub(r'/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '/{uuid}', endpoint)
        endpoint = re.sub(r'/\d+', '/{id}', endpoint)
        return endpoint


def get_metrics():
    """Retorna as métricas no formato Prometheus."""
    return generate_latest()


def record_log(level: str):
    """Registra uma mensagem de log nas métricas."""
    log_messages_total.labels(level=level).inc()


__all__ = [
    "CONTENT_TYPE_LATEST",
    "PrometheusMiddleware",
    "get_metrics",
    "record_log",
    "pedidos_criados_total",
    "falhas_criacao_pedido_total",
    "taxa_entrega_origem_total",
    "geocodificacoes_total",
]

import asyncio
import time
from typing import Awaitable, Callable, Optional

import httpx

from app.api.localizacao.adapters.cache_adapter import CacheAdapter
from app.api.localizacao.contracts.geolocalizacao_contract import IGeocodificacaoProvider
from app.api.localizacao.exceptions import ProvedorIndisponivelError
from app.api.localizacao.models.coordenadas import Coordenadas, ResultadoGeocodificacao
from app.config import settings
from app.utils.logger import logger
from app.utils.prometheus_metrics import geocodificacoes_total


class NominatimAdapter(IGeocodificacaoProvider):
    """
    Adapter para a API Nominatim (OpenStreetMap) - gratuita, sem chave.

    A política de uso exige um User-Agent que identifique a aplicação e no máximo
    uma requisição por segundo; o adapter garante o intervalo mínimo entre
    requisições consecutivas, inclusive entre origem e destino de um mesmo cálculo.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        user_agent: Optional[str] = None,
        intervalo_minimo: Optional[float] = None,
        timeout: Optional[float] = None,
        cache: Optional[CacheAdapter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        relogio: Callable[[], float] = time.monotonic,
        dormir: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_url = base_url or settings.NOMINATIM_URL
        self.user_agent = user_agent or settings.NOMINATIM_USER_AGENT
        self.intervalo_minimo = (
            settings.GEOCODING_MIN_INTERVAL_SECONDS if intervalo_minimo is None else intervalo_minimo
        )
        self.timeout = timeout or settings.GEOCODING_TIMEOUT_SECONDS
        self.cache = cache if cache is not None else CacheAdapter()
        self._transport = transport
        self._relogio = relogio
        self._dormir = dormir
        self._ultima_requisicao: Optional[float] = None
        self._lock = asyncio.Lock()

    async def _respeitar_rate_limit(self) -> None:
        if self._ultima_requisicao is None:
            return
        decorrido = self._relogio() - self._ultima_requisicao
        espera = self.intervalo_minimo - decorrido
        if espera > 0:
            logger.debug(f"[Nominatim] Aguardando {espera:.2f}s (rate limit)")
            await self._dormir(espera)

    async def buscar_coordenadas(self, consulta: str, limite: int = 1) -> Optional[ResultadoGeocodificacao]:
        """
        Busca coordenadas para o endereço no Brasil.

        Returns:
            Primeiro resultado do Nominatim ou None se não houver correspondência

        Raises:
            ProvedorIndisponivelError: erro HTTP, de rede ou resposta inválida
        """
        em_cache = self.cache.get(consulta)
        if em_cache is not None:
            return em_cache

        params = {
            "q": consulta,
            "format": "json",
            "limit": limite,
            "countrycodes": "br",
            "addressdetails": 1,
        }
        headers = {"User-Agent": self.user_agent}

        # Requisições serializadas: nunca duas chamadas simultâneas ao provedor
        async with self._lock:
            await self._respeitar_rate_limit()
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.get(self.base_url, params=params, headers=headers)
                response.raise_for_status()
                resultados = response.json()
            except httpx.HTTPStatusError as e:
                geocodificacoes_total.labels(resultado="erro").inc()
                logger.error(f"[Nominatim] Erro HTTP ao geocodificar '{consulta}': Status {e.response.status_code}")
                raise ProvedorIndisponivelError(f"Nominatim respondeu {e.response.status_code}") from e
            except (httpx.HTTPError, ValueError) as e:
                geocodificacoes_total.labels(resultado="erro").inc()
                logger.error(f"[Nominatim] Erro ao geocodificar '{consulta}': {e}")
                raise ProvedorIndisponivelError("Erro ao consultar o Nominatim") from e
            finally:
                self._ultima_requisicao = self._relogio()

        if not isinstance(resultados, list):
            geocodificacoes_total.labels(resultado="erro").inc()
            logger.error(f"[Nominatim] Resposta inesperada para '{consulta}': {resultados}")
            raise ProvedorIndisponivelError("Resposta inválida do Nominatim")

        if not resultados:
            geocodificacoes_total.labels(resultado="sem_resultado").inc()
            logger.info(f"[Nominatim] Nenhum resultado encontrado para '{consulta}'")
            return None

        primeiro = resultados[0]
        try:
            coords = Coordenadas(latitude=float(primeiro["lat"]), longitude=float(primeiro["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            geocodificacoes_total.labels(resultado="erro").inc()
            raise ProvedorIndisponivelError("Resposta do Nominatim sem coordenadas válidas") from e

        geocodificacoes_total.labels(resultado="ok").inc()
        resultado = ResultadoGeocodificacao(coordenadas=coords, descricao=primeiro.get("display_name"))
        self.cache.set(consulta, resultado)
        logger.info(f"[Nominatim] Coordenadas obtidas para '{consulta}': {coords.to_tuple()}")
        return resultado

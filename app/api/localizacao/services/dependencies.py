from functools import lru_cache

from fastapi import Depends

from app.api.localizacao.adapters.cache_adapter import CacheAdapter
from app.api.localizacao.adapters.nominatim_adapter import NominatimAdapter
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.services.service_cep import CepService
from app.api.localizacao.services.service_distancia import DistanciaService


@lru_cache(maxsize=1)
def _get_nominatim_adapter_instance() -> NominatimAdapter:
    """Singleton: o intervalo mínimo entre requisições vale por instância do adapter."""
    return NominatimAdapter(cache=CacheAdapter())


def get_nominatim_adapter() -> NominatimAdapter:
    return _get_nominatim_adapter_instance()


def get_distancia_service(
    adapter: NominatimAdapter = Depends(get_nominatim_adapter),
) -> IDistanciaService:
    return DistanciaService(adapter)


@lru_cache(maxsize=1)
def _get_cep_service_instance() -> CepService:
    return CepService()


def get_cep_service() -> CepService:
    return _get_cep_service_instance()

from typing import Dict, Optional

from app.api.localizacao.models.coordenadas import ResultadoGeocodificacao


class CacheAdapter:
    """Cache em memória dos resultados de geocodificação, por consulta normalizada."""

    def __init__(self):
        self._cache: Dict[str, ResultadoGeocodificacao] = {}

    @staticmethod
    def _chave(consulta: str) -> str:
        return " ".join(consulta.lower().split())

    def get(self, consulta: str) -> Optional[ResultadoGeocodificacao]:
        return self._cache.get(self._chave(consulta))

    def set(self, consulta: str, resultado: ResultadoGeocodificacao):
        self._cache[self._chave(consulta)] = resultado

    def clear(self, consulta: Optional[str] = None):
        """Limpa o cache. Se consulta for fornecida, remove apenas essa entrada."""
        if consulta:
            self._cache.pop(self._chave(consulta), None)
        else:
            self._cache.clear()

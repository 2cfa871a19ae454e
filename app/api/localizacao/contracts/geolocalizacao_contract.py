from abc import ABC, abstractmethod
from typing import Optional

from app.api.localizacao.models.coordenadas import ResultadoDistancia, ResultadoGeocodificacao


class IGeocodificacaoProvider(ABC):
    """Interface para provedores de geocodificação (Nominatim, etc)."""

    @abstractmethod
    async def buscar_coordenadas(self, consulta: str, limite: int = 1) -> Optional[ResultadoGeocodificacao]:
        """
        Resolve um endereço em texto livre para coordenadas.

        Args:
            consulta: Endereço já formatado para a busca
            limite: Quantidade de candidatos pedidos ao provedor (usa o primeiro)

        Returns:
            Resultado da geocodificação ou None se não houver correspondência

        Raises:
            ProvedorIndisponivelError: falha de rede ou HTTP
        """
        raise NotImplementedError


class IDistanciaService(ABC):
    """Interface para o cálculo de distância entre dois endereços em texto."""

    @abstractmethod
    async def calcular_distancia(
        self,
        origem: str,
        destino: str,
        cidade: Optional[str] = None,
        estado: Optional[str] = None,
    ) -> ResultadoDistancia:
        """
        Raises:
            EnderecoMascaradoError: algum dos endereços está mascarado
            GeocodificacaoError: algum dos endereços não foi encontrado
        """
        raise NotImplementedError

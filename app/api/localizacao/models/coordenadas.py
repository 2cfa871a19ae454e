from pydantic import BaseModel
from typing import Optional, Tuple


class Coordenadas(BaseModel):
    """Value Object para representar coordenadas geográficas."""
    latitude: float
    longitude: float

    def to_tuple(self) -> Tuple[float, float]:
        """Converte para tupla (latitude, longitude)."""
        return (self.latitude, self.longitude)


class ResultadoGeocodificacao(BaseModel):
    """Coordenadas de um endereço e a indicação de precisão da busca."""
    coordenadas: Coordenadas
    descricao: Optional[str] = None
    # True quando só a cidade foi encontrada (busca genérica)
    aproximado: bool = False


class ResultadoDistancia(BaseModel):
    """Distância entre dois endereços geocodificados."""
    distancia_metros: int
    distancia_km: float
    duracao_min: Optional[int] = None
    avisos: list[str] = []

"""
Cálculo de distância entre dois endereços em texto livre.

Cada endereço é geocodificado em duas tentativas: o endereço completo e, se
não houver resultado, apenas "cidade, estado, Brasil" (aceito com aviso de
precisão). A distância é a de círculo máximo (Haversine), em metros inteiros.
"""
import re
from math import atan2, cos, radians, sin, sqrt
from typing import Optional

from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService, IGeocodificacaoProvider
from app.api.localizacao.core.mascara_endereco import endereco_mascarado
from app.api.localizacao.exceptions import EnderecoMascaradoError, GeocodificacaoError, ProvedorIndisponivelError
from app.api.localizacao.models.coordenadas import Coordenadas, ResultadoDistancia, ResultadoGeocodificacao
from app.config import settings
from app.utils.logger import logger

# Raio médio da Terra em metros
_RAIO_TERRA_M = 6_371_000

MENSAGEM_MASCARADO = (
    "Não é possível calcular distância com endereços mascarados. "
    "Por favor, forneça endereços completos."
)


def haversine_metros(origem: Coordenadas, destino: Coordenadas) -> int:
    """Distância de círculo máximo entre duas coordenadas, arredondada em metros."""
    lat1, lon1, lat2, lon2 = map(
        radians, [origem.latitude, origem.longitude, destino.latitude, destino.longitude]
    )
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return round(_RAIO_TERRA_M * c)


def formatar_endereco_para_geocodificacao(endereco: str, cidade: str, estado: str) -> str:
    """
    Normaliza o endereço e completa cidade, estado e país quando ausentes.

    "Rua A - 12 - Centro" -> "Rua A, 12, Centro, Campo Grande, MS, Brasil"
    """
    formatado = re.sub(r"\s*-\s*", ", ", endereco)
    formatado = re.sub(r",+", ",", formatado)
    formatado = re.sub(r"\s+", " ", formatado).strip()
    formatado = re.sub(r",\s*$", "", formatado)

    minusculo = formatado.lower()
    if cidade.lower() not in minusculo:
        formatado += f", {cidade}"
    if estado.lower() not in minusculo:
        formatado += f", {estado}"
    if "brasil" not in minusculo and "brazil" not in minusculo:
        formatado += ", Brasil"
    return formatado


def estimar_duracao_min(distancia_km: float, velocidade_kmh: float) -> int:
    """Tempo estimado em minutos a uma velocidade média fixa."""
    return round((distancia_km / velocidade_kmh) * 60)


class DistanciaService(IDistanciaService):
    def __init__(
        self,
        geocodificacao_provider: IGeocodificacaoProvider,
        *,
        cidade_padrao: Optional[str] = None,
        estado_padrao: Optional[str] = None,
        velocidade_media_kmh: Optional[float] = None,
    ):
        self.provider = geocodificacao_provider
        self.cidade_padrao = cidade_padrao or settings.CIDADE_PADRAO
        self.estado_padrao = estado_padrao or settings.ESTADO_PADRAO
        self.velocidade_media_kmh = velocidade_media_kmh or settings.VELOCIDADE_MEDIA_KMH

    async def geocodificar(self, endereco: str, cidade: str, estado: str) -> Optional[ResultadoGeocodificacao]:
        """Geocodifica com fallback para a cidade. None se nenhuma tentativa encontrar."""
        if endereco_mascarado(endereco):
            logger.warning(f"[Distancia] Endereço mascarado não será geocodificado: {endereco}")
            return None

        completo = formatar_endereco_para_geocodificacao(endereco, cidade, estado)
        resultado = await self.provider.buscar_coordenadas(completo, limite=5)
        if resultado is not None:
            return resultado

        generico = f"{cidade}, {estado}, Brasil"
        logger.warning(f"[Distancia] Nenhum resultado para '{completo}'. Tentando busca genérica: '{generico}'")
        resultado = await self.provider.buscar_coordenadas(generico, limite=1)
        if resultado is None:
            return None
        return resultado.model_copy(update={"aproximado": True})

    async def calcular_distancia(
        self,
        origem: str,
        destino: str,
        cidade: Optional[str] = None,
        estado: Optional[str] = None,
    ) -> ResultadoDistancia:
        if endereco_mascarado(origem) or endereco_mascarado(destino):
            logger.error(f"[Distancia] {MENSAGEM_MASCARADO}")
            raise EnderecoMascaradoError(MENSAGEM_MASCARADO)

        cidade = cidade or self.cidade_padrao
        estado = estado or self.estado_padrao
        logger.info(f"[Distancia] Calculando distância entre '{origem}' e '{destino}'")

        # Origem e destino em sequência: o provider espaça as requisições
        try:
            geo_origem = await self.geocodificar(origem, cidade, estado)
            geo_destino = await self.geocodificar(destino, cidade, estado)
        except ProvedorIndisponivelError as e:
            raise GeocodificacaoError(f"Serviço de geocodificação indisponível: {e}") from e

        if geo_origem is None or geo_destino is None:
            if geo_origem is None and geo_destino is None:
                mensagem = "Não foi possível geocodificar nenhum dos endereços"
            elif geo_origem is None:
                mensagem = f'Não foi possível geocodificar o endereço de origem: "{origem}"'
            else:
                mensagem = f'Não foi possível geocodificar o endereço de destino: "{destino}"'
            logger.error(f"[Distancia] {mensagem}")
            raise GeocodificacaoError(mensagem)

        avisos = []
        if geo_origem.aproximado or geo_destino.aproximado:
            avisos.append("Usando coordenadas genéricas da cidade: a distância pode ser menos precisa.")

        metros = haversine_metros(geo_origem.coordenadas, geo_destino.coordenadas)
        km = round(metros / 1000, 2)
        duracao = estimar_duracao_min(km, self.velocidade_media_kmh)
        logger.info(f"[Distancia] {km}km ({metros}m) - tempo estimado {duracao}min")

        return ResultadoDistancia(distancia_metros=metros, distancia_km=km, duracao_min=duracao, avisos=avisos)

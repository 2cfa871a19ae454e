from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional, Union

from app.api.checkout.schemas.schema_endereco import ContextoRestaurante, EnderecoCheckout, FaixaEntrega, ResultadoTaxa
from app.api.checkout.schemas.schema_shared_enums import OrigemTaxaEnum
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.core.mascara_endereco import endereco_mascarado
from app.api.localizacao.exceptions import LocalizacaoError
from app.utils.logger import logger
from app.utils.prometheus_metrics import taxa_entrega_origem_total

AVISO_TAXA_MINIMA = "Não foi possível calcular a distância. A taxa de entrega exibida é a mínima e pode ser aproximada."


def ordenar_faixas(faixas: Iterable[FaixaEntrega]) -> List[FaixaEntrega]:
    return sorted(faixas, key=lambda f: f.distancia)


def calcular_taxa(distancia_metros: int, faixas: Iterable[FaixaEntrega]) -> Decimal:
    """
    Taxa da faixa que cobre a distância.

    A faixa i cobre [d_i, d_i+1) e a última não tem limite superior, então uma
    distância igual ao limite de uma faixa já paga a faixa seguinte. Abaixo do
    limite da primeira faixa vale a primeira. Tabela vazia não cobra entrega.
    """
    ordenadas = ordenar_faixas(faixas)
    if not ordenadas:
        return Decimal("0")

    escolhida = ordenadas[0]
    for faixa in ordenadas:
        if faixa.distancia <= distancia_metros:
            escolhida = faixa
        else:
            break
    return escolhida.valor


def taxa_minima(faixas: Iterable[FaixaEntrega]) -> Decimal:
    valores = [f.valor for f in faixas]
    return min(valores) if valores else Decimal("0")


def _km(metros: int) -> str:
    return f"{metros / 1000:.1f}"


def formatar_faixas(faixas: Iterable[FaixaEntrega]) -> List[str]:
    """Descrição das faixas para o cliente: "De 0.0km a 3.0km - R$ 5.00"."""
    ordenadas = ordenar_faixas(faixas)
    linhas = []
    for i, faixa in enumerate(ordenadas):
        valor = f"R$ {faixa.valor:.2f}"
        if i + 1 < len(ordenadas):
            proxima = ordenadas[i + 1]
            linhas.append(f"De {_km(faixa.distancia)}km a {_km(proxima.distancia)}km - {valor}")
        else:
            linhas.append(f"Acima de {_km(faixa.distancia)}km - {valor}")
    return linhas


def _distancia_positiva(valor: Optional[int]) -> Optional[int]:
    if valor is None:
        return None
    return valor if valor > 0 else None


class TaxaEntregaService:
    """Resolve a distância de entrega pela ordem de prioridade e calcula a taxa."""

    def __init__(self, distancia_service: Optional[IDistanciaService] = None):
        self.distancia_service = distancia_service

    async def resolver_taxa(
        self,
        endereco: Optional[Union[EnderecoCheckout, str]],
        contexto: ContextoRestaurante,
    ) -> ResultadoTaxa:
        """
        Ordem: distância do endereço do cliente, distância do local de retirada,
        geocodificação (só com endereços sem máscara) e, por fim, a taxa mínima.
        """
        faixas = contexto.faixas_entrega

        distancia = _distancia_positiva(endereco.distancia) if isinstance(endereco, EnderecoCheckout) else None
        if distancia is not None:
            return self._resultado(calcular_taxa(distancia, faixas), distancia, OrigemTaxaEnum.ENDERECO_CLIENTE)

        local = contexto.local_retirada
        distancia = _distancia_positiva(local.distancia) if local else None
        if distancia is not None:
            return self._resultado(calcular_taxa(distancia, faixas), distancia, OrigemTaxaEnum.LOCAL_RETIRADA)

        distancia = await self._geocodificar(endereco, contexto)
        if distancia is not None:
            return self._resultado(calcular_taxa(distancia, faixas), distancia, OrigemTaxaEnum.GEOCODIFICACAO)

        logger.warning(f"[TaxaEntrega] Distância indisponível para {contexto.id}; usando taxa mínima")
        return self._resultado(taxa_minima(faixas), None, OrigemTaxaEnum.TAXA_MINIMA, aviso=AVISO_TAXA_MINIMA)

    async def _geocodificar(
        self,
        endereco: Optional[Union[EnderecoCheckout, str]],
        contexto: ContextoRestaurante,
    ) -> Optional[int]:
        if self.distancia_service is None or contexto.local_retirada is None:
            return None
        origem = contexto.local_retirada.endereco or contexto.local_retirada.descricao
        if isinstance(endereco, EnderecoCheckout):
            if endereco.esta_mascarado() or not endereco.completo():
                return None
            destino = endereco.para_geocodificacao()
        else:
            destino = endereco
        if not origem or not destino or endereco_mascarado(origem) or endereco_mascarado(destino):
            return None

        try:
            resultado = await self.distancia_service.calcular_distancia(
                origem, destino, cidade=contexto.cidade, estado=contexto.estado
            )
        except LocalizacaoError as e:
            logger.warning(f"[TaxaEntrega] Falha na geocodificação: {e}")
            return None
        return _distancia_positiva(resultado.distancia_metros)

    @staticmethod
    def _resultado(
        valor: Decimal,
        distancia: Optional[int],
        origem: OrigemTaxaEnum,
        aviso: Optional[str] = None,
    ) -> ResultadoTaxa:
        taxa_entrega_origem_total.labels(origem=origem.value).inc()
        return ResultadoTaxa(valor=valor, distancia_metros=distancia, origem=origem, aviso=aviso)

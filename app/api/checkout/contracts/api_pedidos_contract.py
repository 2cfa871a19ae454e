"""
Contracts (Interfaces) para a API de pedidos do restaurante.
O checkout depende apenas destas interfaces; o adapter HTTP fica em
`adapters/api_pedidos_adapter.py` e os testes usam implementações em memória.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from app.api.checkout.schemas.schema_endereco import EnderecoCheckout
from app.api.checkout.schemas.schema_pedido_payload import PedidoPayload


class ClienteEncontradoDTO(BaseModel):
    """Cliente retornado pela busca por telefone."""
    nome: str
    telefone: str
    endereco: Optional[EnderecoCheckout] = None


class PedidoCriadoDTO(BaseModel):
    """Resposta da criação de pedido."""
    pedido_id: str
    token: str
    codigo_pix: Optional[str] = None


class IClienteLookup(ABC):
    """Contrato para a busca de cliente por telefone."""

    @abstractmethod
    async def buscar_por_telefone(self, telefone: str, token: Optional[str] = None) -> Optional[ClienteEncontradoDTO]:
        """
        Args:
            telefone: Apenas dígitos, já com código do país
            token: Token da sessão do cliente, enviado como Bearer quando houver

        Returns:
            Cliente encontrado ou None (404)

        Raises:
            ErroConsultaCliente: falha de rede ou HTTP diferente de 404
        """
        raise NotImplementedError


class IPedidoGateway(ABC):
    """Contrato para a criação de pedidos."""

    @abstractmethod
    async def criar_pedido(self, payload: PedidoPayload, token: Optional[str] = None) -> PedidoCriadoDTO:
        """
        Raises:
            ErroCriacaoPedido: qualquer falha; não há criação parcial
        """
        raise NotImplementedError

"""
Contracts para a persistência do estado do cliente (sessão e pedidos locais).
O orquestrador carrega o estado ao montar e salva a cada mutação através
destas interfaces.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from app.api.checkout.schemas.schema_checkout import PedidoLocal, SessaoCliente
from app.api.checkout.schemas.schema_shared_enums import StatusPagamentoEnum


class ISessaoClienteStore(ABC):
    @abstractmethod
    def carregar(self, dispositivo_id: str) -> Optional[SessaoCliente]:
        raise NotImplementedError

    @abstractmethod
    def salvar(self, dispositivo_id: str, sessao: SessaoCliente) -> None:
        raise NotImplementedError

    @abstractmethod
    def remover(self, dispositivo_id: str) -> None:
        raise NotImplementedError


class IPedidoLocalStore(ABC):
    @abstractmethod
    def adicionar(self, dispositivo_id: str, pedido: PedidoLocal) -> None:
        raise NotImplementedError

    @abstractmethod
    def atualizar_status_pagamento(self, pedido_id: str, status: StatusPagamentoEnum) -> Optional[PedidoLocal]:
        raise NotImplementedError

    @abstractmethod
    def listar(self, dispositivo_id: str) -> List[PedidoLocal]:
        raise NotImplementedError

    @abstractmethod
    def obter(self, pedido_id: str) -> Optional[PedidoLocal]:
        raise NotImplementedError

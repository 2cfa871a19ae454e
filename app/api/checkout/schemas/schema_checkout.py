from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.api.checkout.schemas.schema_endereco import EnderecoCheckout
from app.api.checkout.schemas.schema_shared_enums import (
    FormaPagamentoEnum,
    StatusPagamentoEnum,
    StatusPedidoEnum,
    TipoEntregaEnum,
)


class SessaoCliente(BaseModel):
    token: Optional[str] = None
    nome: Optional[str] = None
    telefone: Optional[str] = None
    endereco: Optional[EnderecoCheckout] = None
    autenticado: bool = False

    def valida(self) -> bool:
        """Sessão que permite pular o cadastro: autenticada, com nome e telefone."""
        return bool(self.autenticado and self.nome and self.telefone)


class DadosCliente(BaseModel):
    """Resultado da etapa de cadastro."""
    telefone: str
    nome: str
    data_nascimento: Optional[str] = None
    cliente_existente: bool = False


class SelecaoCheckout(BaseModel):
    tipo_entrega: TipoEntregaEnum
    # Para retirada com rótulo, é o texto do local do restaurante
    endereco: Union[EnderecoCheckout, str]
    forma_pagamento: FormaPagamentoEnum
    taxa_entrega: Optional[Decimal] = None
    distancia_metros: Optional[int] = None
    avisos: List[str] = Field(default_factory=list)


class RascunhoPedido(BaseModel):
    pedido_id: str
    api_pedido_id: str
    api_token: str
    codigo_pix: Optional[str] = None
    status: StatusPagamentoEnum = StatusPagamentoEnum.AGUARDANDO_PAGAMENTO


class ItemPedidoLocal(BaseModel):
    produto_id: int
    nome: str
    quantidade: int
    preco_unitario: Decimal
    modificadores: dict = Field(default_factory=dict)


class PedidoLocal(BaseModel):
    id: str
    api_pedido_id: str
    api_token: str
    itens: List[ItemPedidoLocal] = Field(default_factory=list)
    cliente_nome: str
    cliente_telefone: str
    tipo_entrega: TipoEntregaEnum
    endereco: Optional[str] = None
    status: StatusPedidoEnum = StatusPedidoEnum.PENDING
    valor_total: Decimal
    taxa_entrega: Decimal = Decimal("0")
    forma_pagamento: FormaPagamentoEnum
    status_pagamento: StatusPagamentoEnum
    codigo_pix: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

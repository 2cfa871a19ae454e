from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from app.api.checkout.schemas.schema_carrinho import ItemCarrinho
from app.api.checkout.schemas.schema_checkout import DadosCliente, PedidoLocal
from app.api.checkout.schemas.schema_endereco import ContextoRestaurante, EnderecoCheckout, FaixaEntrega, ResultadoTaxa
from app.api.checkout.schemas.schema_shared_enums import (
    EstadoCriacaoPedido,
    EtapaCheckout,
    FormaPagamentoEnum,
    StatusPagamentoEnum,
    TipoEntregaEnum,
)


# ======================================================================
# ============================ REQUESTS ================================
# ======================================================================
class CriarCheckoutRequest(BaseModel):
    restaurante: ContextoRestaurante
    carrinho: List[ItemCarrinho] = Field(default_factory=list)


class TelefoneRequest(BaseModel):
    telefone: str


class CadastroRequest(BaseModel):
    nome: str
    data_nascimento: Optional[str] = Field(None, description="YYYY-MM-DD")


class CampoEnderecoRequest(BaseModel):
    campo: Literal["rua", "numero", "bairro", "cep", "complemento"]
    valor: Optional[str] = None


class OpcoesCheckoutRequest(BaseModel):
    tipo_entrega: Optional[TipoEntregaEnum] = None
    forma_pagamento: Optional[FormaPagamentoEnum] = None


class FaixasRequest(BaseModel):
    faixas: List[FaixaEntrega] = Field(default_factory=list)


class CalcularTaxaRequest(BaseModel):
    faixas: List[FaixaEntrega] = Field(default_factory=list)
    distancia_metros: Optional[int] = Field(None, ge=0)


class CotarTaxaRequest(BaseModel):
    restaurante: ContextoRestaurante
    endereco: Optional[Union[EnderecoCheckout, str]] = None


# ======================================================================
# ============================ RESPONSES ===============================
# ======================================================================
class FaixasResponse(BaseModel):
    descricoes: List[str]
    taxa_minima: Decimal


class CalcularTaxaResponse(BaseModel):
    valor: Decimal
    taxa_minima: bool = False


class CadastroEstadoResponse(BaseModel):
    etapa: int
    telefone: str
    consultando_telefone: bool
    erros: Dict[str, str] = Field(default_factory=dict)


class PagamentoEstadoResponse(BaseModel):
    estado: EstadoCriacaoPedido
    forma_pagamento: FormaPagamentoEnum
    valor_total: Decimal
    pedido_id: Optional[str] = None
    api_pedido_id: Optional[str] = None
    status: Optional[StatusPagamentoEnum] = None
    codigo_pix: Optional[str] = None
    pix_restante_segundos: Optional[int] = None
    pix_restante: Optional[str] = None
    pix_expirado: bool = False
    mostrar_qr: bool = False
    erro: Optional[str] = None
    erros_validacao: List[str] = Field(default_factory=list)


class CheckoutEstadoResponse(BaseModel):
    id: str
    etapa: EtapaCheckout
    mensagem: Optional[str] = None
    cadastro: Optional[CadastroEstadoResponse] = None
    cliente: Optional[DadosCliente] = None
    endereco: Optional[EnderecoCheckout] = None
    buscando_cep: bool = False
    calculando_distancia: bool = False
    tipo_entrega: TipoEntregaEnum
    forma_pagamento: FormaPagamentoEnum
    taxa: Optional[ResultadoTaxa] = None
    avisos: List[str] = Field(default_factory=list)
    carrinho_total: Decimal
    carrinho_itens: int
    pagamento: Optional[PagamentoEstadoResponse] = None
    pedido_concluido_id: Optional[str] = None


class CopiarPixResponse(BaseModel):
    codigo_pix: str


class PedidosLocaisResponse(BaseModel):
    pedidos: List[PedidoLocal]

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from app.api.checkout.schemas.schema_endereco import EnderecoCheckout


class ModificadorPedido(BaseModel):
    modifier_id: Union[int, str]
    option_id: Union[int, str]


class ItemPedido(BaseModel):
    product_id: int
    quantity: int
    # None (chave omitida) é diferente de lista vazia para a API
    modifiers: Optional[List[ModificadorPedido]] = None


class ClientePedido(BaseModel):
    phone: str
    name: str
    birthdate: Optional[str] = None
    address: Optional[EnderecoCheckout] = None


class DadosPedido(BaseModel):
    items: List[ItemPedido] = Field(default_factory=list)
    payment_method: Literal["pix", "credit_card"]
    delivery: bool


class PedidoPayload(BaseModel):
    """Corpo do `POST /order`."""
    customer: ClientePedido
    order: DadosPedido

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResultadoValidacao(BaseModel):
    valido: bool
    erros: List[str] = Field(default_factory=list)

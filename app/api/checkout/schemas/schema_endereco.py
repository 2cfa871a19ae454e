from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.api.checkout.schemas.schema_shared_enums import OrigemTaxaEnum
from app.api.localizacao.core.mascara_endereco import campos_mascarados
from app.config import settings

CAMPOS_ENDERECO = ("rua", "numero", "bairro", "cep", "complemento")


class EnderecoCheckout(BaseModel):
    """
    Endereço de entrega do cliente.

    Os nomes de fio (`street`, `number`, `neighborhood`, `postalCode`,
    `complement`, `distance`) são os usados pela API de pedidos; qualquer
    campo pode vir mascarado (`*` ou `...`) para clientes recorrentes.
    """
    rua: str = Field("", alias="street")
    numero: str = Field("", alias="number")
    bairro: str = Field("", alias="neighborhood")
    cep: str = Field("", alias="postalCode")
    complemento: Optional[str] = Field(None, alias="complement")
    # Distância em metros até o restaurante, já calculada pelo backend
    distancia: Optional[int] = Field(None, alias="distance")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("rua", "numero", "bairro", "cep", mode="before")
    @classmethod
    def normalizar_texto(cls, v):
        if v is None:
            return ""
        return str(v)

    def campos_mascarados(self) -> list[str]:
        return campos_mascarados(self, CAMPOS_ENDERECO)

    def esta_mascarado(self) -> bool:
        return bool(self.campos_mascarados())

    def completo(self) -> bool:
        """Rua, número, bairro e CEP preenchidos."""
        return all(v.strip() for v in (self.rua, self.numero, self.bairro, self.cep))

    def para_geocodificacao(self) -> str:
        return f"{self.rua}, {self.numero}, {self.bairro}, {self.cep}"

    def formatado(self) -> str:
        """Rua, nº 12 - Bairro - CEP 79600-000"""
        linha1 = ", ".join(p for p in (self.rua, f"nº {self.numero}" if self.numero else "") if p)
        linha2 = " - ".join(p for p in (self.bairro, f"CEP {self.cep}" if self.cep else "") if p)
        return " - ".join(p for p in (linha1, linha2) if p)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class FaixaEntrega(BaseModel):
    """Faixa da tabela de taxas: vale a partir de `distancia` metros (inclusive)."""
    distancia: int = Field(..., ge=0, alias="distance", description="Limite inferior da faixa, em metros.")
    valor: Decimal = Field(..., ge=0, alias="value", examples=["7.00"])

    model_config = ConfigDict(populate_by_name=True)


class LocalRetirada(BaseModel):
    descricao: str
    endereco: Optional[str] = None
    # Distância pré-calculada entre o restaurante e o cliente, quando conhecida
    distancia: Optional[int] = None


class ContextoRestaurante(BaseModel):
    id: str
    nome: str
    faixas_entrega: list[FaixaEntrega] = Field(default_factory=list)
    local_retirada: Optional[LocalRetirada] = None
    cidade: str = settings.CIDADE_PADRAO
    estado: str = settings.ESTADO_PADRAO


class ResultadoTaxa(BaseModel):
    valor: Decimal
    distancia_metros: Optional[int] = None
    origem: OrigemTaxaEnum
    aviso: Optional[str] = None

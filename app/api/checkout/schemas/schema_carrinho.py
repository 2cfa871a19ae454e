import uuid
from decimal import Decimal
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

IdModificador = Union[int, str]


class ItemCardapio(BaseModel):
    id: int
    nome: str
    preco: Decimal = Decimal("0")

    model_config = ConfigDict(extra="ignore")


class ItemCarrinho(BaseModel):
    id: str = Field(default_factory=lambda: f"cart-{uuid.uuid4().hex}")
    item_cardapio: ItemCardapio
    quantidade: int = Field(1, ge=1)
    # grupo de modificador -> opções escolhidas
    modificadores_selecionados: Dict[str, List[IdModificador]] = Field(default_factory=dict)
    # Preço unitário já com os adicionais
    preco_total: Decimal

    @property
    def total_linha(self) -> Decimal:
        return self.preco_total * self.quantidade


class Carrinho:
    """Carrinho do cliente. Itens iguais (mesmo produto e mesmos modificadores) somam quantidade."""

    def __init__(self, itens: Optional[List[ItemCarrinho]] = None):
        self.itens: List[ItemCarrinho] = list(itens or [])

    def adicionar(self, item: ItemCarrinho) -> ItemCarrinho:
        for existente in self.itens:
            if (
                existente.item_cardapio.id == item.item_cardapio.id
                and existente.modificadores_selecionados == item.modificadores_selecionados
            ):
                existente.quantidade += item.quantidade
                return existente
        self.itens.append(item)
        return item

    def remover(self, item_id: str) -> None:
        self.itens = [i for i in self.itens if i.id != item_id]

    def atualizar(self, item_id: str, quantidade: int) -> None:
        if quantidade <= 0:
            self.remover(item_id)
            return
        for item in self.itens:
            if item.id == item_id:
                item.quantidade = quantidade

    def limpar(self) -> None:
        self.itens = []

    def total(self) -> Decimal:
        return sum((i.total_linha for i in self.itens), Decimal("0"))

    def quantidade_itens(self) -> int:
        return sum(i.quantidade for i in self.itens)

    def vazio(self) -> bool:
        return not self.itens

    def __iter__(self):
        return iter(self.itens)

    def __len__(self):
        return len(self.itens)

import os

# Precisa vir antes de qualquer import de `app`: settings lê o ambiente no import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_TO_FILE"] = "false"
os.environ["DEBOUNCE_SECONDS"] = "0.01"
os.environ["RUNNING_IN_DOCKER"] = "1"

import asyncio
from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from app.api.checkout.contracts.api_pedidos_contract import (
    ClienteEncontradoDTO,
    IClienteLookup,
    IPedidoGateway,
    PedidoCriadoDTO,
)
from app.api.checkout.contracts.estado_cliente_contract import IPedidoLocalStore, ISessaoClienteStore
from app.api.checkout.schemas.schema_carrinho import Carrinho, ItemCardapio, ItemCarrinho
from app.api.checkout.schemas.schema_checkout import PedidoLocal, SessaoCliente
from app.api.checkout.schemas.schema_endereco import ContextoRestaurante, FaixaEntrega, LocalRetirada
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.models.coordenadas import ResultadoDistancia
from app.api.localizacao.models.resultado_cep import ResultadoCep
from app.api.localizacao.services.service_cep import AVISO_CEP_NAO_ENCONTRADO, CepService
from app.utils.viacep_client import formatar_cep, limpar_cep


class FakeClienteLookup(IClienteLookup):
    def __init__(self, clientes: Optional[Dict[str, ClienteEncontradoDTO]] = None, erro: Optional[Exception] = None):
        self.clientes = clientes or {}
        self.erro = erro
        self.chamadas: List[str] = []
        self.tokens: List[Optional[str]] = []

    async def buscar_por_telefone(self, telefone: str, token: Optional[str] = None) -> Optional[ClienteEncontradoDTO]:
        self.chamadas.append(telefone)
        self.tokens.append(token)
        if self.erro is not None:
            raise self.erro
        return self.clientes.get(telefone)


class FakePedidoGateway(IPedidoGateway):
    def __init__(self, erros: Optional[List[Exception]] = None, atraso: float = 0, codigo_pix: Optional[str] = "00020126PIXCOPIAECOLA"):
        self.erros = list(erros or [])
        self.atraso = atraso
        self.codigo_pix = codigo_pix
        self.chamadas = []

    async def criar_pedido(self, payload, token=None) -> PedidoCriadoDTO:
        self.chamadas.append((payload, token))
        if self.atraso:
            await asyncio.sleep(self.atraso)
        if self.erros:
            raise self.erros.pop(0)
        return PedidoCriadoDTO(
            pedido_id=str(1000 + len(self.chamadas)),
            token="token-servidor",
            codigo_pix=self.codigo_pix,
        )


class FakeDistanciaService(IDistanciaService):
    def __init__(self, metros: int = 3500, erro: Optional[Exception] = None):
        self.metros = metros
        self.erro = erro
        self.chamadas = []

    async def calcular_distancia(self, origem, destino, cidade=None, estado=None) -> ResultadoDistancia:
        self.chamadas.append((origem, destino))
        if self.erro is not None:
            raise self.erro
        return ResultadoDistancia(
            distancia_metros=self.metros,
            distancia_km=round(self.metros / 1000, 2),
            duracao_min=7,
        )


class FakeCepService(CepService):
    def __init__(self, enderecos: Optional[Dict[str, Dict[str, str]]] = None):
        self.enderecos = enderecos or {}
        self.chamadas: List[str] = []

    async def buscar(self, cep: str) -> ResultadoCep:
        self.chamadas.append(cep)
        dados = self.enderecos.get(limpar_cep(cep))
        if dados is None:
            return ResultadoCep(cep=formatar_cep(cep), aviso=AVISO_CEP_NAO_ENCONTRADO)
        return ResultadoCep(cep=formatar_cep(cep), encontrado=True, **dados)


class MemoriaSessaoStore(ISessaoClienteStore):
    def __init__(self):
        self.sessoes: Dict[str, SessaoCliente] = {}

    def carregar(self, dispositivo_id):
        return self.sessoes.get(dispositivo_id)

    def salvar(self, dispositivo_id, sessao):
        self.sessoes[dispositivo_id] = sessao

    def remover(self, dispositivo_id):
        self.sessoes.pop(dispositivo_id, None)


class MemoriaPedidoStore(IPedidoLocalStore):
    def __init__(self):
        self.pedidos: Dict[str, List[PedidoLocal]] = {}

    def adicionar(self, dispositivo_id, pedido):
        self.pedidos.setdefault(dispositivo_id, []).insert(0, pedido)

    def atualizar_status_pagamento(self, pedido_id, status):
        for lista in self.pedidos.values():
            for i, pedido in enumerate(lista):
                if pedido.id == pedido_id:
                    lista[i] = pedido.model_copy(update={"status_pagamento": status})
                    return lista[i]
        return None

    def listar(self, dispositivo_id):
        return list(self.pedidos.get(dispositivo_id, []))

    def obter(self, pedido_id):
        for lista in self.pedidos.values():
            for pedido in lista:
                if pedido.id == pedido_id:
                    return pedido
        return None


FAIXAS = [
    FaixaEntrega(distancia=0, valor=Decimal("5")),
    FaixaEntrega(distancia=3000, valor=Decimal("7")),
    FaixaEntrega(distancia=5000, valor=Decimal("10")),
]


@pytest.fixture
def faixas():
    return list(FAIXAS)


@pytest.fixture
def contexto():
    return ContextoRestaurante(
        id="rest-1",
        nome="Pizzaria Centro",
        faixas_entrega=list(FAIXAS),
        local_retirada=LocalRetirada(descricao="Loja Centro", endereco="Rua 14 de Julho, 1000, Centro"),
        cidade="Campo Grande",
        estado="MS",
    )


def novo_item(produto_id: int = 1, quantidade: int = 2, preco: str = "30.00", modificadores=None) -> ItemCarrinho:
    return ItemCarrinho(
        item_cardapio=ItemCardapio(id=produto_id, nome=f"Produto {produto_id}", preco=Decimal(preco)),
        quantidade=quantidade,
        modificadores_selecionados=modificadores or {},
        preco_total=Decimal(preco),
    )


@pytest.fixture
def carrinho():
    c = Carrinho()
    c.adicionar(novo_item())
    return c

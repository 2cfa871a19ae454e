from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.checkout.adapters.estado_cliente_adapter import PedidoLocalAdapter, SessaoClienteAdapter
from app.api.checkout.schemas.schema_checkout import ItemPedidoLocal, PedidoLocal, SessaoCliente
from app.api.checkout.schemas.schema_endereco import EnderecoCheckout
from app.api.checkout.schemas.schema_shared_enums import FormaPagamentoEnum, StatusPagamentoEnum, TipoEntregaEnum
from app.database.db_connection import Base
from app.database.init_db import importar_models


@pytest.fixture
def session_factory():
    importar_models()
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _pedido(pedido_id="order-1"):
    return PedidoLocal(
        id=pedido_id,
        api_pedido_id="321",
        api_token="tok",
        itens=[ItemPedidoLocal(produto_id=1, nome="Pizza", quantidade=2, preco_unitario=Decimal("30.00"))],
        cliente_nome="Maria Souza",
        cliente_telefone="5567999999999",
        tipo_entrega=TipoEntregaEnum.DELIVERY,
        endereco="Rua A, nº 12 - Centro - CEP 79600-000",
        valor_total=Decimal("67.00"),
        taxa_entrega=Decimal("7.00"),
        forma_pagamento=FormaPagamentoEnum.PIX,
        status_pagamento=StatusPagamentoEnum.AGUARDANDO_PAGAMENTO,
        codigo_pix="000201",
    )


def test_sessao_salva_carrega_e_remove(session_factory):
    store = SessaoClienteAdapter(session_factory)
    endereco = EnderecoCheckout(rua="Rua A", numero="12", bairro="Centro", cep="79600-000", distancia=2100)

    store.salvar("disp-1", SessaoCliente(token="tok", nome="Maria Souza", telefone="(67) 99999-9999", endereco=endereco, autenticado=True))
    store.salvar("disp-1", SessaoCliente(token="tok-2", nome="Maria Souza", telefone="(67) 99999-9999", endereco=endereco, autenticado=True))

    sessao = store.carregar("disp-1")
    assert sessao.token == "tok-2"
    assert sessao.endereco.distancia == 2100
    assert sessao.valida()

    store.remover("disp-1")
    assert store.carregar("disp-1") is None


def test_pedidos_por_dispositivo(session_factory):
    store = PedidoLocalAdapter(session_factory)
    store.adicionar("disp-1", _pedido("order-1"))
    store.adicionar("disp-2", _pedido("order-2"))

    pedidos = store.listar("disp-1")
    assert [p.id for p in pedidos] == ["order-1"]
    assert pedidos[0].itens[0].nome == "Pizza"
    assert pedidos[0].valor_total == Decimal("67.00")


def test_atualizar_status_pagamento(session_factory):
    store = PedidoLocalAdapter(session_factory)
    store.adicionar("disp-1", _pedido())

    atualizado = store.atualizar_status_pagamento("order-1", StatusPagamentoEnum.PENDENTE_CONFIRMACAO)

    assert atualizado.status_pagamento == StatusPagamentoEnum.PENDENTE_CONFIRMACAO
    assert store.obter("order-1").status_pagamento == StatusPagamentoEnum.PENDENTE_CONFIRMACAO
    assert store.atualizar_status_pagamento("nao-existe", StatusPagamentoEnum.CONFIRMADO) is None

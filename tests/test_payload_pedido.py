from decimal import Decimal

from conftest import novo_item

from app.api.checkout.schemas.schema_carrinho import Carrinho
from app.api.checkout.schemas.schema_checkout import DadosCliente, SelecaoCheckout
from app.api.checkout.schemas.schema_endereco import EnderecoCheckout
from app.api.checkout.schemas.schema_shared_enums import FormaPagamentoEnum, TipoEntregaEnum
from app.api.checkout.services.service_payload_pedido import PayloadPedidoService, validar_endereco

CLIENTE = DadosCliente(telefone="(67) 99999-9999", nome="Maria Souza")
ENDERECO = EnderecoCheckout(rua="Rua A", numero="12", bairro="Centro", cep="79600-000")


def _selecao(tipo=TipoEntregaEnum.DELIVERY, endereco=ENDERECO, forma=FormaPagamentoEnum.PIX, **kw):
    return SelecaoCheckout(tipo_entrega=tipo, endereco=endereco, forma_pagamento=forma, **kw)


def test_item_sem_modificadores_omite_a_chave():
    carrinho = Carrinho([novo_item(produto_id=1, quantidade=2)])
    payload = PayloadPedidoService().construir(CLIENTE, _selecao(), carrinho)

    assert payload.to_wire()["order"]["items"] == [{"product_id": 1, "quantity": 2}]


def test_modificadores_viram_pares_grupo_opcao():
    carrinho = Carrinho([novo_item(modificadores={"10": [101, 102], "20": [201]})])
    payload = PayloadPedidoService().construir(CLIENTE, _selecao(), carrinho)

    assert payload.to_wire()["order"]["items"][0]["modifiers"] == [
        {"modifier_id": "10", "option_id": 101},
        {"modifier_id": "10", "option_id": 102},
        {"modifier_id": "20", "option_id": 201},
    ]


def test_telefone_normalizado_e_forma_de_pagamento():
    payload = PayloadPedidoService().construir(
        CLIENTE, _selecao(forma=FormaPagamentoEnum.CARD), Carrinho([novo_item()])
    )
    wire = payload.to_wire()
    assert wire["customer"]["phone"] == "5567999999999"
    assert wire["order"]["payment_method"] == "credit_card"
    assert wire["order"]["delivery"] is True
    assert wire["customer"]["address"]["postalCode"] == "79600-000"


def test_retirada_nao_envia_endereco():
    selecao = _selecao(tipo=TipoEntregaEnum.PICKUP, endereco="Loja Centro")
    payload = PayloadPedidoService().construir(CLIENTE, selecao, Carrinho([novo_item()]))

    wire = payload.to_wire()
    assert "address" not in wire["customer"]
    assert wire["order"]["delivery"] is False
    assert PayloadPedidoService().validar(payload).valido


def test_distancia_da_selecao_completa_o_endereco():
    payload = PayloadPedidoService().construir(CLIENTE, _selecao(distancia_metros=3200), Carrinho([novo_item()]))
    assert payload.customer.address.distancia == 3200


def test_telefone_mascarado_passa_na_validacao():
    cliente = DadosCliente(telefone="(67) *****-9999", nome="Maria Souza")
    service = PayloadPedidoService()
    payload = service.construir(cliente, _selecao(), Carrinho([novo_item()]))

    assert payload.customer.phone == "(67) *****-9999"
    assert service.validar(payload).valido


def test_validacao_coleta_todos_os_erros():
    cliente = DadosCliente(telefone="679", nome="Al")
    endereco = EnderecoCheckout(rua="R", numero="", bairro="Ce", cep="7960")
    service = PayloadPedidoService()
    payload = service.construir(cliente, _selecao(endereco=endereco), Carrinho())

    resultado = service.validar(payload)

    assert not resultado.valido
    assert resultado.erros == [
        "Telefone inválido",
        "Nome inválido",
        "Rua inválida (mínimo 3 caracteres)",
        "Número é obrigatório",
        "Bairro inválido (mínimo 3 caracteres)",
        "CEP inválido (deve ter 8 dígitos)",
        "Carrinho vazio",
    ]


def test_campo_mascarado_nao_e_validado():
    endereco = EnderecoCheckout(rua="Rua A", numero="1*", bairro="Centro", cep="796*****")
    assert validar_endereco(endereco) == []


def test_cep_invalido_sem_mascara():
    endereco = EnderecoCheckout(rua="Rua A", numero="12", bairro="Centro", cep="79600-00")
    assert validar_endereco(endereco) == ["CEP inválido (deve ter 8 dígitos)"]


def test_carrinho_soma_itens_iguais():
    carrinho = Carrinho()
    carrinho.adicionar(novo_item(quantidade=1, preco="10.00"))
    carrinho.adicionar(novo_item(quantidade=2, preco="10.00"))
    carrinho.adicionar(novo_item(produto_id=2, quantidade=1, preco="5.50"))

    assert len(carrinho) == 2
    assert carrinho.quantidade_itens() == 4
    assert carrinho.total() == Decimal("35.50")

    primeiro = carrinho.itens[0]
    carrinho.atualizar(primeiro.id, 0)
    assert len(carrinho) == 1

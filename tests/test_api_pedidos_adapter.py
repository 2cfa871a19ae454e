import asyncio
import json

import httpx
import pytest

from app.api.checkout.adapters.api_pedidos_adapter import ApiPedidosAdapter
from app.api.checkout.exceptions import ErroConsultaCliente, ErroCriacaoPedido
from app.api.checkout.schemas.schema_pedido_payload import ClientePedido, DadosPedido, ItemPedido, PedidoPayload


def _adapter(handler):
    return ApiPedidosAdapter("https://pedidos.test", timeout=5, transport=httpx.MockTransport(handler))


def _payload():
    return PedidoPayload(
        customer=ClientePedido(phone="5567999999999", name="Maria Souza"),
        order=DadosPedido(items=[ItemPedido(product_id=1, quantity=2)], payment_method="pix", delivery=False),
    )


def test_busca_cliente_encontrado_com_endereco():
    def handler(request):
        assert request.url.path == "/customer/phone/5567999999999"
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "name": "Maria Souza",
                    "phone": "(67) *****-9999",
                    "address": {"street": "Rua A", "number": "1*", "neighborhood": "Centro", "postalCode": "79600000"},
                },
            },
        )

    cliente = asyncio.run(_adapter(handler).buscar_por_telefone("5567999999999"))

    assert cliente.nome == "Maria Souza"
    assert cliente.endereco.rua == "Rua A"
    assert cliente.endereco.esta_mascarado()


def test_busca_cliente_envia_token_da_sessao():
    recebidas = []

    def handler(request):
        recebidas.append(request)
        return httpx.Response(404)

    adapter = _adapter(handler)
    asyncio.run(adapter.buscar_por_telefone("5567999999999", token="token-sessao"))
    asyncio.run(adapter.buscar_por_telefone("5567999999999"))

    assert recebidas[0].headers["Authorization"] == "Bearer token-sessao"
    assert "Authorization" not in recebidas[1].headers


def test_busca_cliente_404_retorna_none():
    cliente = asyncio.run(_adapter(lambda r: httpx.Response(404)).buscar_por_telefone("5567999999999"))
    assert cliente is None


def test_busca_cliente_erro_do_servidor():
    with pytest.raises(ErroConsultaCliente):
        asyncio.run(_adapter(lambda r: httpx.Response(500, json={"message": "boom"})).buscar_por_telefone("55"))


def test_criar_pedido_envia_token_e_payload():
    recebidas = []

    def handler(request):
        recebidas.append(request)
        return httpx.Response(200, json={"orderId": 321, "token": "novo-token", "pix": {"copyAndPaste": "000201"}})

    criado = asyncio.run(_adapter(handler).criar_pedido(_payload(), token="token-antigo"))

    assert criado.pedido_id == "321"
    assert criado.token == "novo-token"
    assert criado.codigo_pix == "000201"
    assert recebidas[0].headers["Authorization"] == "Bearer token-antigo"
    corpo = json.loads(recebidas[0].content)
    assert corpo["order"]["items"] == [{"product_id": 1, "quantity": 2}]
    assert "address" not in corpo["customer"]


def test_criar_pedido_sem_token_nao_envia_authorization():
    recebidas = []

    def handler(request):
        recebidas.append(request)
        return httpx.Response(200, json={"success": True, "data": {"orderId": "9", "token": "t"}})

    criado = asyncio.run(_adapter(handler).criar_pedido(_payload()))

    assert "Authorization" not in recebidas[0].headers
    assert criado.codigo_pix is None


def test_criar_pedido_mensagem_de_erro_da_api():
    def handler(request):
        return httpx.Response(400, json={"success": False, "error": {"message": "Produto indisponível", "code": "X1"}})

    with pytest.raises(ErroCriacaoPedido) as exc:
        asyncio.run(_adapter(handler).criar_pedido(_payload()))
    assert exc.value.mensagem == "Produto indisponível"
    assert exc.value.status_code == 400


def test_criar_pedido_success_false():
    def handler(request):
        return httpx.Response(200, json={"success": False, "error": {"message": "Loja fechada", "code": "CLOSED"}})

    with pytest.raises(ErroCriacaoPedido) as exc:
        asyncio.run(_adapter(handler).criar_pedido(_payload()))
    assert exc.value.codigo == "CLOSED"


def test_criar_pedido_timeout():
    def handler(request):
        raise httpx.ReadTimeout("lento", request=request)

    with pytest.raises(ErroCriacaoPedido, match="Tempo esgotado"):
        asyncio.run(_adapter(handler).criar_pedido(_payload()))


def test_criar_pedido_sem_token_na_resposta():
    with pytest.raises(ErroCriacaoPedido):
        asyncio.run(_adapter(lambda r: httpx.Response(200, json={"orderId": 1})).criar_pedido(_payload()))

import uuid

import pytest
from conftest import FAIXAS, FakeCepService, FakeClienteLookup, FakeDistanciaService, FakePedidoGateway
from fastapi.testclient import TestClient

from app.api.checkout.contracts.api_pedidos_contract import ClienteEncontradoDTO
from app.api.checkout.exceptions import ErroCriacaoPedido
from app.api.checkout.services.dependencies import get_cliente_lookup, get_pedido_gateway
from app.api.localizacao.services.dependencies import get_cep_service, get_distancia_service
from app.main import app

RESTAURANTE = {
    "id": "rest-1",
    "nome": "Pizzaria Centro",
    "faixas_entrega": [{"distance": f.distancia, "value": str(f.valor)} for f in FAIXAS],
    "local_retirada": {"descricao": "Loja Centro", "endereco": "Rua 14 de Julho, 1000, Centro"},
}
CARRINHO = [
    {
        "item_cardapio": {"id": 1, "nome": "Pizza Calabresa", "preco": "30.00"},
        "quantidade": 2,
        "preco_total": "30.00",
    }
]


@pytest.fixture
def fakes():
    f = {
        "lookup": FakeClienteLookup(),
        "gateway": FakePedidoGateway(),
        "cep": FakeCepService({"79600000": {"rua": "Rua Sete", "bairro": "Centro"}}),
        "distancia": FakeDistanciaService(metros=3500),
    }
    app.dependency_overrides[get_cliente_lookup] = lambda: f["lookup"]
    app.dependency_overrides[get_pedido_gateway] = lambda: f["gateway"]
    app.dependency_overrides[get_cep_service] = lambda: f["cep"]
    app.dependency_overrides[get_distancia_service] = lambda: f["distancia"]
    yield f
    app.dependency_overrides.clear()


@pytest.fixture
def client(fakes):
    with TestClient(app) as c:
        c.cookies.set("dispositivo_id", uuid.uuid4().hex)
        yield c


def _criar_checkout(client):
    resp = client.post("/api/checkout/client/checkouts", json={"restaurante": RESTAURANTE, "carrinho": CARRINHO})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _cadastrar(client, checkout_id):
    resp = client.put(
        f"/api/checkout/client/checkouts/{checkout_id}/cadastro/telefone",
        json={"telefone": "(67) 99999-9999"},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["cadastro"]["etapa"] == 2
    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/cadastro", json={"nome": "Maria Souza"})
    assert resp.status_code == 200, resp.text
    return resp.json()


def _preencher_endereco(client, checkout_id):
    url = f"/api/checkout/client/checkouts/{checkout_id}/endereco"
    client.put(url, json={"campo": "numero", "valor": "120"})
    resp = client.put(url, json={"campo": "cep", "valor": "79600000"})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_fluxo_completo_pix(client, fakes):
    estado = _criar_checkout(client)
    assert estado["etapa"] == "cadastro"
    assert estado["carrinho_total"] == "60.00"
    checkout_id = estado["id"]

    estado = _cadastrar(client, checkout_id)
    assert estado["etapa"] == "checkout"
    assert fakes["lookup"].chamadas == ["5567999999999"]

    estado = _preencher_endereco(client, checkout_id)
    assert estado["endereco"]["street"] == "Rua Sete"
    assert estado["endereco"]["postalCode"] == "79600-000"
    assert estado["endereco"]["distance"] == 3500

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/confirmar")
    assert resp.status_code == 200, resp.text
    estado = resp.json()
    assert estado["etapa"] == "pagamento"
    assert estado["taxa"]["valor"] == "7"
    assert estado["pagamento"]["estado"] == "concluido"
    assert estado["pagamento"]["valor_total"] == "67.00"
    assert estado["pagamento"]["status"] == "aguardando_pagamento"
    assert estado["pagamento"]["codigo_pix"] == "00020126PIXCOPIAECOLA"
    assert "customer_token=token-servidor" in resp.headers["set-cookie"]

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/pix/copiar")
    assert resp.json() == {"codigo_pix": "00020126PIXCOPIAECOLA"}

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/pix/ja-paguei")
    pedido_id = resp.json()["pedido_concluido_id"]
    assert pedido_id.startswith("order-")

    pedidos = client.get("/api/checkout/client/pedidos").json()["pedidos"]
    assert [p["id"] for p in pedidos] == [pedido_id]
    assert pedidos[0]["status_pagamento"] == "pendente_confirmacao"
    assert len(fakes["gateway"].chamadas) == 1


def test_sessao_salva_pula_cadastro_no_proximo_checkout(client):
    checkout_id = _criar_checkout(client)["id"]
    _cadastrar(client, checkout_id)
    client.put(f"/api/checkout/client/checkouts/{checkout_id}/opcoes", json={"tipo_entrega": "pickup", "forma_pagamento": "card"})
    client.post(f"/api/checkout/client/checkouts/{checkout_id}/confirmar")
    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/cartao/confirmar")
    assert resp.json()["pagamento"]["status"] == "pendente"

    estado = _criar_checkout(client)
    assert estado["etapa"] == "checkout"
    assert estado["cliente"]["nome"] == "Maria Souza"


def test_cliente_encontrado_vai_para_checkout(client, fakes):
    fakes["lookup"].clientes["5567999999999"] = ClienteEncontradoDTO(nome="Maria Souza", telefone="(67) *****-9999")
    checkout_id = _criar_checkout(client)["id"]

    resp = client.put(
        f"/api/checkout/client/checkouts/{checkout_id}/cadastro/telefone",
        json={"telefone": "67999999999"},
    )

    assert resp.json()["etapa"] == "checkout"
    assert resp.json()["mensagem"] == "Encontramos seu cadastro, Maria Souza!"


def test_endereco_invalido_retorna_422_sem_chamar_api(client, fakes):
    checkout_id = _criar_checkout(client)["id"]
    _cadastrar(client, checkout_id)

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/confirmar")

    assert resp.status_code == 422
    assert "Rua inválida (mínimo 3 caracteres)" in resp.json()["detail"]
    assert fakes["gateway"].chamadas == []


def test_falha_da_api_retorna_502_e_permite_nova_tentativa(client, fakes):
    fakes["gateway"].erros.append(ErroCriacaoPedido("Erro de conexão ao criar pedido. Tente novamente."))
    checkout_id = _criar_checkout(client)["id"]
    _cadastrar(client, checkout_id)
    _preencher_endereco(client, checkout_id)

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/confirmar")
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Erro de conexão ao criar pedido. Tente novamente."

    estado = client.get(f"/api/checkout/client/checkouts/{checkout_id}").json()
    assert estado["etapa"] == "pagamento"
    assert estado["pagamento"]["estado"] == "falhou"

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/pagamento/tentar-novamente")
    assert resp.status_code == 200, resp.text
    assert resp.json()["pagamento"]["estado"] == "concluido"


def test_voltar_e_sair(client):
    checkout_id = _criar_checkout(client)["id"]
    _cadastrar(client, checkout_id)

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/voltar")
    assert resp.json()["etapa"] == "cadastro"

    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/sair")
    assert resp.json()["etapa"] == "cadastro"


def test_acao_fora_da_etapa_retorna_409(client):
    checkout_id = _criar_checkout(client)["id"]
    resp = client.post(f"/api/checkout/client/checkouts/{checkout_id}/pix/renovar")
    assert resp.status_code == 409


def test_checkout_de_outro_dispositivo_nao_e_encontrado(client):
    checkout_id = _criar_checkout(client)["id"]
    client.cookies.set("dispositivo_id", "outro-dispositivo")

    resp = client.get(f"/api/checkout/client/checkouts/{checkout_id}")
    assert resp.status_code == 404


def test_taxas_publicas(client):
    faixas = RESTAURANTE["faixas_entrega"]

    resp = client.post("/api/checkout/public/taxas/faixas", json={"faixas": faixas})
    assert resp.json()["descricoes"][-1] == "Acima de 5.0km - R$ 10.00"

    resp = client.post("/api/checkout/public/taxas/calcular", json={"faixas": faixas, "distancia_metros": 3000})
    assert resp.json() == {"valor": "7", "taxa_minima": False}

    resp = client.post("/api/checkout/public/taxas/calcular", json={"faixas": faixas})
    assert resp.json()["taxa_minima"] is True

    endereco = {"street": "Rua A", "number": "12*", "neighborhood": "Centro", "postalCode": "79600000"}
    resp = client.post("/api/checkout/public/taxas/cotar", json={"restaurante": RESTAURANTE, "endereco": endereco})
    assert resp.json()["origem"] == "taxa_minima"
    assert resp.json()["valor"] == "5"


def test_localizacao(client):
    resp = client.get("/api/localizacao/cep/79600-000")
    assert resp.json()["rua"] == "Rua Sete"

    resp = client.post("/api/localizacao/calcular-distancia", json={"origem": "Rua A, 1", "destino": "Rua B, 2"})
    assert resp.json()["distancia_metros"] == 3500


def test_metricas_e_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    resp = client.get("/api/monitoring/metrics")
    assert resp.status_code == 200
    assert "pedidos_criados_total" in resp.text

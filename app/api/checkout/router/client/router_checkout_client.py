from fastapi import APIRouter, Body, Depends, Path, Response, status

from app.api.checkout.contracts.api_pedidos_contract import IClienteLookup, IPedidoGateway
from app.api.checkout.contracts.estado_cliente_contract import IPedidoLocalStore, ISessaoClienteStore
from app.api.checkout.exceptions import TransicaoInvalidaError
from app.api.checkout.schemas.schema_carrinho import Carrinho
from app.api.checkout.schemas.schema_requests import (
    CadastroEstadoResponse,
    CadastroRequest,
    CampoEnderecoRequest,
    CheckoutEstadoResponse,
    CopiarPixResponse,
    CriarCheckoutRequest,
    OpcoesCheckoutRequest,
    PagamentoEstadoResponse,
    PedidosLocaisResponse,
    TelefoneRequest,
)
from app.api.checkout.schemas.schema_shared_enums import EtapaCheckout
from app.api.checkout.services.dependencies import (
    RegistroCheckouts,
    get_cliente_lookup,
    get_dispositivo_id,
    get_pedido_gateway,
    get_pedido_store,
    get_registro_checkouts,
    get_sessao_store,
)
from app.api.checkout.services.service_orquestrador import EstadoAplicacao, OrquestradorCheckout
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.services.dependencies import get_cep_service, get_distancia_service
from app.api.localizacao.services.service_cep import CepService
from app.config import settings
from app.utils.logger import logger

router = APIRouter(prefix="/api/checkout/client", tags=["Client - Checkout"])


def _estado(checkout_id: str, orq: OrquestradorCheckout) -> CheckoutEstadoResponse:
    cadastro = None
    if orq.cadastro is not None:
        cadastro = CadastroEstadoResponse(
            etapa=orq.cadastro.etapa,
            telefone=orq.cadastro.telefone,
            consultando_telefone=orq.cadastro.consultando_telefone,
            erros=orq.cadastro.erros,
        )

    pagamento = None
    if orq.pagamento is not None:
        p = orq.pagamento
        rascunho = p.rascunho
        pagamento = PagamentoEstadoResponse(
            estado=p.estado,
            forma_pagamento=p.forma_pagamento,
            valor_total=p.valor_total,
            pedido_id=rascunho.pedido_id if rascunho else None,
            api_pedido_id=rascunho.api_pedido_id if rascunho else None,
            status=rascunho.status if rascunho else None,
            codigo_pix=rascunho.codigo_pix if rascunho else None,
            pix_restante_segundos=p.contador.restante if rascunho and rascunho.codigo_pix else None,
            pix_restante=p.contador.formatado() if rascunho and rascunho.codigo_pix else None,
            pix_expirado=p.pix_expirado,
            mostrar_qr=p.mostrar_qr,
            erro=p.erro,
            erros_validacao=p.erros_validacao,
        )

    avisos = list(orq.selecao.avisos) if orq.selecao else []
    if orq.editor is not None:
        avisos.extend(orq.editor.avisos)
    if orq.taxa is not None and orq.taxa.aviso and orq.taxa.aviso not in avisos:
        avisos.append(orq.taxa.aviso)

    mensagem = orq.cadastro.mensagem if orq.cadastro is not None else orq.mensagem
    carrinho = orq.estado_app.carrinho
    return CheckoutEstadoResponse(
        id=checkout_id,
        etapa=orq.etapa,
        mensagem=mensagem,
        cadastro=cadastro,
        cliente=orq.dados_cliente,
        endereco=orq.editor.endereco if orq.editor else None,
        buscando_cep=orq.editor.buscando_cep if orq.editor else False,
        calculando_distancia=orq.editor.calculando_distancia if orq.editor else False,
        tipo_entrega=orq.tipo_entrega,
        forma_pagamento=orq.forma_pagamento,
        taxa=orq.taxa,
        avisos=avisos,
        carrinho_total=carrinho.total(),
        carrinho_itens=carrinho.quantidade_itens(),
        pagamento=pagamento,
        pedido_concluido_id=orq.pedido_concluido_id,
    )


def _sincronizar_cookie_token(response: Response, orq: OrquestradorCheckout) -> None:
    token = orq.estado_app.sessao.token
    if token:
        response.set_cookie(
            settings.CUSTOMER_TOKEN_COOKIE,
            token,
            max_age=settings.CUSTOMER_TOKEN_EXPIRY_DAYS * 24 * 60 * 60,
            secure=True,
            samesite="strict",
        )


def _obter(
    checkout_id: str = Path(...),
    dispositivo_id: str = Depends(get_dispositivo_id),
    registro: RegistroCheckouts = Depends(get_registro_checkouts),
) -> OrquestradorCheckout:
    return registro.obter(checkout_id, dispositivo_id)


def _exigir_cadastro(orq: OrquestradorCheckout):
    if orq.etapa != EtapaCheckout.CADASTRO or orq.cadastro is None:
        raise TransicaoInvalidaError("Ação disponível apenas na etapa de cadastro")
    return orq.cadastro


def _exigir_pagamento(orq: OrquestradorCheckout):
    if orq.etapa != EtapaCheckout.PAGAMENTO or orq.pagamento is None:
        raise TransicaoInvalidaError("Ação disponível apenas na etapa de pagamento")
    return orq.pagamento


# ======================================================================
# ============================ CHECKOUT ================================
@router.post("/checkouts", response_model=CheckoutEstadoResponse, status_code=status.HTTP_201_CREATED)
def criar_checkout(
    payload: CriarCheckoutRequest = Body(...),
    dispositivo_id: str = Depends(get_dispositivo_id),
    registro: RegistroCheckouts = Depends(get_registro_checkouts),
    sessao_store: ISessaoClienteStore = Depends(get_sessao_store),
    pedido_store: IPedidoLocalStore = Depends(get_pedido_store),
    cliente_lookup: IClienteLookup = Depends(get_cliente_lookup),
    pedido_gateway: IPedidoGateway = Depends(get_pedido_gateway),
    cep_service: CepService = Depends(get_cep_service),
    distancia_service: IDistanciaService = Depends(get_distancia_service),
):
    """
    Inicia um checkout para o carrinho informado.

    A etapa inicial é decidida aqui: sessão válida (token, nome e telefone)
    vai direto para o checkout; caso contrário começa pelo cadastro.
    """
    carrinho = Carrinho()
    for item in payload.carrinho:
        carrinho.adicionar(item)

    estado_app = EstadoAplicacao.carregar(dispositivo_id, sessao_store, pedido_store, carrinho=carrinho)
    orq = OrquestradorCheckout(
        estado_app,
        payload.restaurante,
        cliente_lookup,
        pedido_gateway,
        cep_service,
        distancia_service=distancia_service,
    )
    orq.montar()
    checkout_id = registro.adicionar(dispositivo_id, orq)
    return _estado(checkout_id, orq)


@router.get("/checkouts/{checkout_id}", response_model=CheckoutEstadoResponse)
def obter_checkout(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    return _estado(checkout_id, orq)


@router.delete("/checkouts/{checkout_id}", status_code=status.HTTP_204_NO_CONTENT)
def encerrar_checkout(
    checkout_id: str,
    orq: OrquestradorCheckout = Depends(_obter),
    registro: RegistroCheckouts = Depends(get_registro_checkouts),
):
    registro.remover(checkout_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/checkouts/{checkout_id}/voltar", response_model=CheckoutEstadoResponse)
def voltar(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    orq.voltar()
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/sair", response_model=CheckoutEstadoResponse)
def sair(checkout_id: str, response: Response, orq: OrquestradorCheckout = Depends(_obter)):
    """ "Não é você?" """
    orq.sair()
    response.delete_cookie(settings.CUSTOMER_TOKEN_COOKIE)
    return _estado(checkout_id, orq)


# ======================================================================
# ============================ CADASTRO ================================
@router.put("/checkouts/{checkout_id}/cadastro/telefone", response_model=CheckoutEstadoResponse)
async def alterar_telefone(
    checkout_id: str,
    payload: TelefoneRequest = Body(...),
    orq: OrquestradorCheckout = Depends(_obter),
):
    """
    Edição do telefone. Com 11 dígitos a busca do cliente é agendada (debounce);
    a resposta sai depois que ela assenta.
    """
    cadastro = _exigir_cadastro(orq)
    cadastro.alterar_telefone(payload.telefone)
    await cadastro.aguardar()
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/cadastro/telefone", response_model=CheckoutEstadoResponse)
async def enviar_telefone(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    await _exigir_cadastro(orq).enviar_telefone()
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/cadastro", response_model=CheckoutEstadoResponse)
def enviar_cadastro(
    checkout_id: str,
    payload: CadastroRequest = Body(...),
    orq: OrquestradorCheckout = Depends(_obter),
):
    _exigir_cadastro(orq).enviar_cadastro(payload.nome, payload.data_nascimento)
    return _estado(checkout_id, orq)


# ======================================================================
# ============================ ENDEREÇO ================================
@router.put("/checkouts/{checkout_id}/endereco", response_model=CheckoutEstadoResponse)
async def alterar_endereco(
    checkout_id: str,
    payload: CampoEnderecoRequest = Body(...),
    orq: OrquestradorCheckout = Depends(_obter),
):
    orq.alterar_endereco(payload.campo, payload.valor)
    await orq.editor.aguardar()
    return _estado(checkout_id, orq)


@router.put("/checkouts/{checkout_id}/opcoes", response_model=CheckoutEstadoResponse)
def alterar_opcoes(
    checkout_id: str,
    payload: OpcoesCheckoutRequest = Body(...),
    orq: OrquestradorCheckout = Depends(_obter),
):
    if payload.tipo_entrega is not None:
        orq.selecionar_tipo_entrega(payload.tipo_entrega)
    if payload.forma_pagamento is not None:
        orq.selecionar_forma_pagamento(payload.forma_pagamento)
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/taxa", response_model=CheckoutEstadoResponse)
async def calcular_taxa(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    await orq.calcular_taxa()
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/confirmar", response_model=CheckoutEstadoResponse)
async def confirmar_checkout(
    checkout_id: str,
    response: Response,
    orq: OrquestradorCheckout = Depends(_obter),
):
    """
    Vai para o pagamento. No PIX o pedido é criado nesta chamada.

    Endereço inválido responde 422 sem chamar a API de pedidos; falha da API
    responde 502 e o checkout continua na etapa de pagamento.
    """
    await orq.confirmar_checkout()
    _sincronizar_cookie_token(response, orq)
    return _estado(checkout_id, orq)


# ======================================================================
# ============================ PAGAMENTO ===============================
@router.post("/checkouts/{checkout_id}/pix/renovar", response_model=CheckoutEstadoResponse)
def renovar_pix(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    _exigir_pagamento(orq).renovar_pix()
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/pix/qr", response_model=CheckoutEstadoResponse)
def alternar_qr(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    _exigir_pagamento(orq).alternar_qr()
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/pix/copiar", response_model=CopiarPixResponse)
def copiar_pix(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    return CopiarPixResponse(codigo_pix=_exigir_pagamento(orq).copiar_codigo())


@router.post("/checkouts/{checkout_id}/pix/ja-paguei", response_model=CheckoutEstadoResponse)
def confirmar_pagamento_pix(checkout_id: str, orq: OrquestradorCheckout = Depends(_obter)):
    _exigir_pagamento(orq).confirmar_pagamento_pix()
    logger.info(f"[Checkout] Cliente declarou pagamento PIX no checkout {checkout_id}")
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/pagamento/tentar-novamente", response_model=CheckoutEstadoResponse)
async def tentar_novamente(
    checkout_id: str,
    response: Response,
    orq: OrquestradorCheckout = Depends(_obter),
):
    await _exigir_pagamento(orq).tentar_novamente()
    _sincronizar_cookie_token(response, orq)
    return _estado(checkout_id, orq)


@router.post("/checkouts/{checkout_id}/cartao/confirmar", response_model=CheckoutEstadoResponse)
async def confirmar_pedido_cartao(
    checkout_id: str,
    response: Response,
    orq: OrquestradorCheckout = Depends(_obter),
):
    await _exigir_pagamento(orq).confirmar_pedido_cartao()
    _sincronizar_cookie_token(response, orq)
    return _estado(checkout_id, orq)


# ======================================================================
# ============================ HISTÓRICO ===============================
@router.get("/pedidos", response_model=PedidosLocaisResponse)
def listar_pedidos(
    dispositivo_id: str = Depends(get_dispositivo_id),
    pedido_store: IPedidoLocalStore = Depends(get_pedido_store),
):
    return PedidosLocaisResponse(pedidos=pedido_store.listar(dispositivo_id))

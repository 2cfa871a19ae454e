"""
Orquestrador do checkout: cadastro -> checkout -> pagamento.

O estado do cliente (sessão, carrinho e pedidos locais) é explícito em
`EstadoAplicacao`, carregado do banco ao montar e salvo a cada mutação.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, List, Optional

from app.api.checkout.contracts.api_pedidos_contract import ClienteEncontradoDTO, IClienteLookup, IPedidoGateway
from app.api.checkout.contracts.estado_cliente_contract import IPedidoLocalStore, ISessaoClienteStore
from app.api.checkout.exceptions import PayloadInvalidoError, TransicaoInvalidaError
from app.api.checkout.schemas.schema_carrinho import Carrinho
from app.api.checkout.schemas.schema_checkout import (
    DadosCliente,
    ItemPedidoLocal,
    PedidoLocal,
    RascunhoPedido,
    SelecaoCheckout,
    SessaoCliente,
)
from app.api.checkout.schemas.schema_endereco import ContextoRestaurante, EnderecoCheckout, ResultadoTaxa
from app.api.checkout.schemas.schema_pedido_payload import PedidoPayload
from app.api.checkout.schemas.schema_shared_enums import (
    EtapaCheckout,
    FormaPagamentoEnum,
    OrigemTaxaEnum,
    StatusPedidoEnum,
    TipoEntregaEnum,
)
from app.api.checkout.services.service_cadastro import CadastroService
from app.api.checkout.services.service_endereco_checkout import EditorEndereco
from app.api.checkout.services.service_sessao_pagamento import SessaoPagamento
from app.api.checkout.services.service_taxa_entrega import TaxaEntregaService
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.services.service_cep import CepService
from app.utils.debounce import Debouncer
from app.utils.logger import logger


class EstadoAplicacao:
    """Sessão, carrinho e histórico do cliente, com persistência na fronteira."""

    def __init__(
        self,
        dispositivo_id: str,
        sessao_store: ISessaoClienteStore,
        pedido_store: IPedidoLocalStore,
        *,
        carrinho: Optional[Carrinho] = None,
        sessao: Optional[SessaoCliente] = None,
    ):
        self.dispositivo_id = dispositivo_id
        self.sessao_store = sessao_store
        self.pedido_store = pedido_store
        self.carrinho = carrinho or Carrinho()
        self.sessao = sessao or SessaoCliente()

    @classmethod
    def carregar(
        cls,
        dispositivo_id: str,
        sessao_store: ISessaoClienteStore,
        pedido_store: IPedidoLocalStore,
        carrinho: Optional[Carrinho] = None,
    ) -> "EstadoAplicacao":
        sessao = sessao_store.carregar(dispositivo_id)
        return cls(dispositivo_id, sessao_store, pedido_store, carrinho=carrinho, sessao=sessao)

    def atualizar_sessao(self, **campos) -> SessaoCliente:
        self.sessao = self.sessao.model_copy(update=campos)
        self.sessao_store.salvar(self.dispositivo_id, self.sessao)
        return self.sessao

    def limpar_sessao(self) -> None:
        self.sessao = SessaoCliente()
        self.sessao_store.remover(self.dispositivo_id)

    def registrar_pedido(self, pedido: PedidoLocal) -> None:
        self.pedido_store.adicionar(self.dispositivo_id, pedido)

    def pedidos(self) -> List[PedidoLocal]:
        return self.pedido_store.listar(self.dispositivo_id)


def mesclar_endereco(novo: EnderecoCheckout, atual: Optional[EnderecoCheckout]) -> EnderecoCheckout:
    """Endereço salvo do cliente, mantendo a distância já conhecida quando o novo não traz."""
    if novo.distancia is None and atual is not None and atual.distancia:
        return novo.model_copy(update={"distancia": atual.distancia})
    return novo


class OrquestradorCheckout:
    def __init__(
        self,
        estado_app: EstadoAplicacao,
        contexto: ContextoRestaurante,
        cliente_lookup: IClienteLookup,
        pedido_gateway: IPedidoGateway,
        cep_service: CepService,
        *,
        distancia_service: Optional[IDistanciaService] = None,
        taxa_service: Optional[TaxaEntregaService] = None,
        ao_pedido_concluido: Optional[Callable[[str], None]] = None,
        debounce_segundos: Optional[float] = None,
    ):
        self.estado_app = estado_app
        self.contexto = contexto
        self.cliente_lookup = cliente_lookup
        self.pedido_gateway = pedido_gateway
        self.cep_service = cep_service
        self.distancia_service = distancia_service
        self.taxa_service = taxa_service or TaxaEntregaService(distancia_service)
        self.ao_pedido_concluido = ao_pedido_concluido
        self.debounce_segundos = debounce_segundos

        self.etapa: Optional[EtapaCheckout] = None
        self.cadastro: Optional[CadastroService] = None
        self.dados_cliente: Optional[DadosCliente] = None
        self.editor: Optional[EditorEndereco] = None
        self.tipo_entrega = TipoEntregaEnum.DELIVERY
        self.forma_pagamento = FormaPagamentoEnum.PIX
        self.taxa: Optional[ResultadoTaxa] = None
        self.selecao: Optional[SelecaoCheckout] = None
        self.pagamento: Optional[SessaoPagamento] = None
        self.pedido_concluido_id: Optional[str] = None
        self.mensagem: Optional[str] = None

    def _debouncer(self) -> Optional[Debouncer]:
        if self.debounce_segundos is None:
            return None
        return Debouncer(self.debounce_segundos)

    # --------------------------- montagem ---------------------------
    def montar(self) -> EtapaCheckout:
        """Decide a etapa inicial uma única vez."""
        if self.etapa is not None:
            return self.etapa
        sessao = self.estado_app.sessao
        if sessao.valida():
            self._entrar_checkout(DadosCliente(telefone=sessao.telefone, nome=sessao.nome, cliente_existente=True))
        else:
            self._entrar_cadastro()
        logger.info(f"[Checkout] Montado na etapa {self.etapa.value}")
        return self.etapa

    def ao_alterar_sessao(self, sessao: SessaoCliente) -> None:
        """Sessão mudou fora do fluxo (ex.: login em outra aba). Ignorado durante o pagamento."""
        self.estado_app.sessao = sessao
        if self.etapa == EtapaCheckout.PAGAMENTO:
            logger.debug("[Checkout] Alteração de sessão ignorada durante o pagamento")
            return
        if self.etapa == EtapaCheckout.CADASTRO and sessao.valida():
            self._sair_cadastro()
            self._entrar_checkout(DadosCliente(telefone=sessao.telefone, nome=sessao.nome, cliente_existente=True))

    def desmontar(self) -> None:
        self._sair_cadastro()
        self._sair_checkout()
        self._sair_pagamento()

    # --------------------------- cadastro ---------------------------
    def _entrar_cadastro(self) -> None:
        self.etapa = EtapaCheckout.CADASTRO
        self.cadastro = CadastroService(
            self.cliente_lookup,
            self._concluir_cadastro,
            debouncer=self._debouncer(),
            token=self.estado_app.sessao.token,
        )

    def _sair_cadastro(self) -> None:
        if self.cadastro is not None:
            self.cadastro.fechar()
            self.cadastro = None

    def _concluir_cadastro(self, dados: DadosCliente, cliente: Optional[ClienteEncontradoDTO]) -> None:
        if self.etapa != EtapaCheckout.CADASTRO:
            return
        if cliente is not None and cliente.endereco is not None:
            endereco = mesclar_endereco(cliente.endereco, self.estado_app.sessao.endereco)
            self.estado_app.atualizar_sessao(endereco=endereco)
        self.mensagem = self.cadastro.mensagem if self.cadastro else None
        # Chamado de dentro da consulta do cadastro: não cancelar a própria tarefa
        self.cadastro = None
        self._entrar_checkout(dados)

    # --------------------------- checkout ---------------------------
    def _entrar_checkout(self, dados: DadosCliente) -> None:
        self.etapa = EtapaCheckout.CHECKOUT
        self.dados_cliente = dados
        self.editor = EditorEndereco(
            self.contexto,
            self.cep_service,
            self.distancia_service,
            endereco=self.estado_app.sessao.endereco,
            debouncer=self._debouncer(),
        )

    def _sair_checkout(self) -> None:
        if self.editor is not None:
            self.editor.fechar()
            self.editor = None
        self.taxa = None

    def _exigir_etapa(self, etapa: EtapaCheckout) -> None:
        if self.etapa != etapa:
            raise TransicaoInvalidaError(
                f"Ação disponível apenas na etapa {etapa.value} (etapa atual: {self.etapa.value if self.etapa else '-'})"
            )

    def selecionar_tipo_entrega(self, tipo: TipoEntregaEnum) -> None:
        self._exigir_etapa(EtapaCheckout.CHECKOUT)
        if tipo != self.tipo_entrega:
            self.tipo_entrega = tipo
            self.taxa = None

    def selecionar_forma_pagamento(self, forma: FormaPagamentoEnum) -> None:
        self._exigir_etapa(EtapaCheckout.CHECKOUT)
        self.forma_pagamento = forma

    def alterar_endereco(self, campo: str, valor: Optional[str]) -> EnderecoCheckout:
        self._exigir_etapa(EtapaCheckout.CHECKOUT)
        self.taxa = None
        return self.editor.alterar_campo(campo, valor)

    def endereco_retirada(self) -> str:
        local = self.contexto.local_retirada
        if local is None:
            return self.contexto.nome
        return local.endereco or local.descricao

    async def calcular_taxa(self) -> ResultadoTaxa:
        self._exigir_etapa(EtapaCheckout.CHECKOUT)
        if self.tipo_entrega == TipoEntregaEnum.PICKUP:
            self.taxa = ResultadoTaxa(valor=Decimal("0"), origem=OrigemTaxaEnum.LOCAL_RETIRADA)
            return self.taxa
        endereco = await self.editor.aguardar()
        self.taxa = await self.taxa_service.resolver_taxa(endereco, self.contexto)
        return self.taxa

    async def confirmar_checkout(self) -> Optional[RascunhoPedido]:
        """
        Checkout -> pagamento. Valida o endereço (só na entrega), fecha a
        seleção e monta o pagamento; no PIX o pedido é criado aqui.

        Raises:
            PayloadInvalidoError: endereço ou pedido inválidos (sem chamada à API)
            ErroCriacaoPedido: falha da API; a etapa continua em pagamento
        """
        self._exigir_etapa(EtapaCheckout.CHECKOUT)
        avisos: List[str] = []

        if self.tipo_entrega == TipoEntregaEnum.DELIVERY:
            endereco = await self.editor.aguardar()
            erros = self.editor.validar()
            if erros:
                raise PayloadInvalidoError(erros)
            avisos.extend(self.editor.consumir_avisos())
        else:
            endereco = self.endereco_retirada()

        taxa = self.taxa or await self.calcular_taxa()
        if taxa.aviso:
            avisos.append(taxa.aviso)

        self.selecao = SelecaoCheckout(
            tipo_entrega=self.tipo_entrega,
            endereco=endereco,
            forma_pagamento=self.forma_pagamento,
            taxa_entrega=taxa.valor,
            distancia_metros=taxa.distancia_metros,
            avisos=avisos,
        )
        self._entrar_pagamento()
        return await self.pagamento.montar()

    # --------------------------- pagamento ---------------------------
    def _entrar_pagamento(self) -> None:
        self.etapa = EtapaCheckout.PAGAMENTO
        self.pagamento = SessaoPagamento(
            self.dados_cliente,
            self.selecao,
            self.estado_app.carrinho,
            self.contexto,
            self.pedido_gateway,
            token=self.estado_app.sessao.token,
            ao_pedido_criado=self._ao_pedido_criado,
            ao_concluir=self._ao_concluir_pagamento,
        )

    def _sair_pagamento(self) -> None:
        if self.pagamento is not None:
            self.pagamento.desmontar()
            self.pagamento = None
        self.selecao = None

    def _ao_pedido_criado(self, pagamento: SessaoPagamento, payload: PedidoPayload) -> None:
        # Só dados da própria sessão de pagamento: o cliente pode ter voltado
        # de etapa enquanto a criação estava em andamento
        rascunho = pagamento.rascunho
        selecao = pagamento.selecao
        cliente = pagamento.cliente
        endereco = selecao.endereco if isinstance(selecao.endereco, EnderecoCheckout) else None

        campos = {
            "token": rascunho.api_token,
            "nome": cliente.nome,
            "telefone": cliente.telefone,
            "autenticado": True,
        }
        if endereco is not None:
            campos["endereco"] = endereco
        self.estado_app.atualizar_sessao(**campos)

        carrinho = pagamento.carrinho
        self.estado_app.registrar_pedido(
            PedidoLocal(
                id=rascunho.pedido_id,
                api_pedido_id=rascunho.api_pedido_id,
                api_token=rascunho.api_token,
                itens=[
                    ItemPedidoLocal(
                        produto_id=item.item_cardapio.id,
                        nome=item.item_cardapio.nome,
                        quantidade=item.quantidade,
                        preco_unitario=item.preco_total,
                        modificadores=item.modificadores_selecionados,
                    )
                    for item in carrinho
                ],
                cliente_nome=cliente.nome,
                cliente_telefone=payload.customer.phone,
                tipo_entrega=selecao.tipo_entrega,
                endereco=endereco.formatado() if endereco else str(selecao.endereco),
                status=StatusPedidoEnum.PENDING,
                valor_total=pagamento.valor_total,
                taxa_entrega=selecao.taxa_entrega or Decimal("0"),
                forma_pagamento=selecao.forma_pagamento,
                status_pagamento=rascunho.status,
                codigo_pix=rascunho.codigo_pix,
            )
        )
        carrinho.limpar()

    def _ao_concluir_pagamento(self, rascunho: RascunhoPedido) -> None:
        self.estado_app.pedido_store.atualizar_status_pagamento(rascunho.pedido_id, rascunho.status)
        self.pedido_concluido_id = rascunho.pedido_id
        logger.info(f"[Checkout] Pedido {rascunho.pedido_id} concluído ({rascunho.status.value})")
        if self.ao_pedido_concluido:
            self.ao_pedido_concluido(rascunho.pedido_id)

    # --------------------------- navegação ---------------------------
    def voltar(self) -> EtapaCheckout:
        """Volta uma etapa descartando os dados da etapa seguinte."""
        if self.etapa == EtapaCheckout.PAGAMENTO:
            self._sair_pagamento()
            self.etapa = EtapaCheckout.CHECKOUT
        elif self.etapa == EtapaCheckout.CHECKOUT:
            self._sair_checkout()
            self.dados_cliente = None
            self._entrar_cadastro()
        elif self.etapa == EtapaCheckout.CADASTRO and self.cadastro is not None and self.cadastro.etapa == 2:
            self.cadastro.voltar_etapa()
        else:
            raise TransicaoInvalidaError("Não há etapa anterior")
        return self.etapa

    def sair(self) -> EtapaCheckout:
        """Botão "Não é você?": descarta a sessão salva e recomeça pelo cadastro."""
        self.estado_app.limpar_sessao()
        self.desmontar()
        self.dados_cliente = None
        self._entrar_cadastro()
        logger.info(f"[Checkout] Sessão encerrada no dispositivo {self.estado_app.dispositivo_id}")
        return self.etapa

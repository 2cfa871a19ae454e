"""
Sessão de pagamento (PIX ou cartão na entrega).

O pedido é criado no máximo uma vez por sessão. A guarda é o
`EstadoCriacaoPedido`, que passa para `em_andamento` antes de qualquer await:
montagens repetidas ou cliques duplos viram no-op silencioso.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, List, Optional

from app.api.checkout.contracts.api_pedidos_contract import IPedidoGateway
from app.api.checkout.exceptions import ErroCriacaoPedido, PagamentoExpiradoError, PayloadInvalidoError, TransicaoInvalidaError
from app.api.checkout.schemas.schema_carrinho import Carrinho
from app.api.checkout.schemas.schema_checkout import DadosCliente, RascunhoPedido, SelecaoCheckout
from app.api.checkout.schemas.schema_endereco import ContextoRestaurante
from app.api.checkout.schemas.schema_pedido_payload import PedidoPayload
from app.api.checkout.schemas.schema_shared_enums import EstadoCriacaoPedido, FormaPagamentoEnum, StatusPagamentoEnum
from app.api.checkout.services.service_payload_pedido import PayloadPedidoService
from app.config import settings
from app.utils.contador_regressivo import ContadorRegressivo
from app.utils.database_utils import gerar_id_pedido_local
from app.utils.logger import logger
from app.utils.prometheus_metrics import falhas_criacao_pedido_total, pedidos_criados_total

AoPedidoCriado = Callable[["SessaoPagamento", PedidoPayload], None]
AoConcluir = Callable[[RascunhoPedido], None]

MENSAGEM_PIX_EXPIRADO = "O código PIX expirou. Gere um novo código para continuar."


class SessaoPagamento:
    def __init__(
        self,
        cliente: DadosCliente,
        selecao: SelecaoCheckout,
        carrinho: Carrinho,
        contexto: ContextoRestaurante,
        gateway: IPedidoGateway,
        *,
        token: Optional[str] = None,
        payload_service: Optional[PayloadPedidoService] = None,
        ao_pedido_criado: Optional[AoPedidoCriado] = None,
        ao_concluir: Optional[AoConcluir] = None,
        expiracao_pix_segundos: Optional[int] = None,
    ):
        self.cliente = cliente
        self.selecao = selecao
        self.carrinho = carrinho
        self.contexto = contexto
        self.gateway = gateway
        self.token = token
        self.payload_service = payload_service or PayloadPedidoService()
        self.ao_pedido_criado = ao_pedido_criado
        self.ao_concluir = ao_concluir

        self.estado = EstadoCriacaoPedido.NAO_INICIADO
        self.rascunho: Optional[RascunhoPedido] = None
        self.erro: Optional[str] = None
        self.erros_validacao: List[str] = []
        self.mostrar_qr = False
        self.desmontado = False
        self.valor_total = carrinho.total() + (selecao.taxa_entrega or Decimal("0"))
        self.contador = ContadorRegressivo(
            expiracao_pix_segundos or settings.PIX_EXPIRACAO_SEGUNDOS,
            ao_expirar=self._ao_expirar_pix,
        )

    @property
    def forma_pagamento(self) -> FormaPagamentoEnum:
        return self.selecao.forma_pagamento

    @property
    def pix_expirado(self) -> bool:
        return self.contador.expirado

    async def montar(self) -> Optional[RascunhoPedido]:
        """Entrada na etapa de pagamento. No PIX cria o pedido (uma única vez)."""
        if self.forma_pagamento != FormaPagamentoEnum.PIX:
            return self.rascunho
        return await self._criar_pedido()

    def desmontar(self) -> None:
        """Saída da etapa: para o contador. Uma criação em andamento segue até o fim."""
        self.desmontado = True
        self.contador.parar()

    async def tentar_novamente(self) -> Optional[RascunhoPedido]:
        """Nova tentativa explícita depois de uma falha."""
        if self.estado != EstadoCriacaoPedido.FALHOU:
            return self.rascunho
        if self.forma_pagamento == FormaPagamentoEnum.CARD:
            return await self.confirmar_pedido_cartao()
        self.estado = EstadoCriacaoPedido.NAO_INICIADO
        return await self._criar_pedido()

    async def confirmar_pedido_cartao(self) -> Optional[RascunhoPedido]:
        """Botão "Confirmar Pedido" (cartão na entrega)."""
        if self.forma_pagamento != FormaPagamentoEnum.CARD:
            raise TransicaoInvalidaError("Confirmação de cartão indisponível para pagamento PIX")
        if self.estado in (EstadoCriacaoPedido.EM_ANDAMENTO, EstadoCriacaoPedido.CONCLUIDO):
            return self.rascunho
        if self.estado == EstadoCriacaoPedido.FALHOU:
            self.estado = EstadoCriacaoPedido.NAO_INICIADO
        rascunho = await self._criar_pedido()
        if rascunho is not None and self.ao_concluir:
            self.ao_concluir(rascunho)
        return rascunho

    async def _criar_pedido(self) -> Optional[RascunhoPedido]:
        if self.estado in (EstadoCriacaoPedido.EM_ANDAMENTO, EstadoCriacaoPedido.CONCLUIDO):
            logger.debug(f"[Pagamento] Criação ignorada (estado={self.estado.value})")
            return self.rascunho
        if self.estado == EstadoCriacaoPedido.FALHOU:
            # Só `tentar_novamente`/confirmação explícita reabrem a criação
            return None

        # Guarda marcada antes de qualquer await
        self.estado = EstadoCriacaoPedido.EM_ANDAMENTO
        self.erro = None
        self.erros_validacao = []

        payload = self.payload_service.construir(self.cliente, self.selecao, self.carrinho, self.contexto)
        validacao = self.payload_service.validar(payload)
        if not validacao.valido:
            self.estado = EstadoCriacaoPedido.FALHOU
            self.erros_validacao = validacao.erros
            raise PayloadInvalidoError(validacao.erros)

        forma = self.forma_pagamento.value
        try:
            criado = await self.gateway.criar_pedido(payload, self.token)
        except ErroCriacaoPedido as e:
            self.estado = EstadoCriacaoPedido.FALHOU
            self.erro = e.mensagem
            falhas_criacao_pedido_total.labels(forma_pagamento=forma).inc()
            logger.error(f"[Pagamento] Falha ao criar pedido: {e.mensagem}")
            raise

        self.rascunho = RascunhoPedido(
            pedido_id=gerar_id_pedido_local(),
            api_pedido_id=criado.pedido_id,
            api_token=criado.token,
            codigo_pix=criado.codigo_pix,
            status=(
                StatusPagamentoEnum.AGUARDANDO_PAGAMENTO
                if self.forma_pagamento == FormaPagamentoEnum.PIX
                else StatusPagamentoEnum.PENDENTE
            ),
        )
        self.estado = EstadoCriacaoPedido.CONCLUIDO
        pedidos_criados_total.labels(forma_pagamento=forma).inc()
        logger.info(f"[Pagamento] Pedido {self.rascunho.api_pedido_id} criado ({forma})")

        if self.ao_pedido_criado:
            self.ao_pedido_criado(self, payload)

        # Etapa já desmontada (cliente voltou): sem contador órfão
        if self.forma_pagamento == FormaPagamentoEnum.PIX and not self.desmontado:
            self.contador.iniciar()
        return self.rascunho

    # ---------------------------- PIX ----------------------------
    def _ao_expirar_pix(self) -> None:
        self.mostrar_qr = False
        logger.info(f"[Pagamento] {MENSAGEM_PIX_EXPIRADO}")

    def _exigir_codigo_pix(self) -> str:
        if self.forma_pagamento != FormaPagamentoEnum.PIX:
            raise TransicaoInvalidaError("Ação disponível apenas para pagamento PIX")
        if self.rascunho is None or not self.rascunho.codigo_pix:
            raise TransicaoInvalidaError("Código PIX ainda não disponível")
        return self.rascunho.codigo_pix

    def renovar_pix(self) -> None:
        """Reinicia o contador. O código é o mesmo: o pedido já existe no backend."""
        self._exigir_codigo_pix()
        self.contador.reiniciar()

    def alternar_qr(self) -> bool:
        self._exigir_codigo_pix()
        if self.pix_expirado:
            raise PagamentoExpiradoError(MENSAGEM_PIX_EXPIRADO)
        self.mostrar_qr = not self.mostrar_qr
        return self.mostrar_qr

    def copiar_codigo(self) -> str:
        codigo = self._exigir_codigo_pix()
        if self.pix_expirado:
            raise PagamentoExpiradoError(MENSAGEM_PIX_EXPIRADO)
        return codigo

    def confirmar_pagamento_pix(self) -> RascunhoPedido:
        """Botão "Já realizei o pagamento". Declaração do cliente, sem verificação no servidor."""
        if self.forma_pagamento != FormaPagamentoEnum.PIX:
            raise TransicaoInvalidaError("Ação disponível apenas para pagamento PIX")
        if self.rascunho is None:
            raise TransicaoInvalidaError("Pedido ainda não foi criado")
        self.rascunho = self.rascunho.model_copy(update={"status": StatusPagamentoEnum.PENDENTE_CONFIRMACAO})
        self.contador.parar()
        if self.ao_concluir:
            self.ao_concluir(self.rascunho)
        return self.rascunho

from typing import List, Optional


class CheckoutError(Exception):
    """Erro base do contexto de checkout."""


class PayloadInvalidoError(CheckoutError):
    """Payload do pedido reprovado na validação local. Nada foi enviado à API."""

    def __init__(self, erros: List[str]):
        self.erros = list(erros)
        super().__init__("; ".join(self.erros))


class ErroCriacaoPedido(CheckoutError):
    """Falha da API de pedidos ao criar o pedido (rede, HTTP ou resposta de erro)."""

    def __init__(self, mensagem: str, codigo: Optional[str] = None, status_code: Optional[int] = None):
        self.mensagem = mensagem
        self.codigo = codigo
        self.status_code = status_code
        super().__init__(mensagem)


class ErroConsultaCliente(CheckoutError):
    """Falha de rede ou HTTP na busca de cliente por telefone."""


class TransicaoInvalidaError(CheckoutError):
    """Ação não permitida na etapa atual do checkout."""


class PagamentoExpiradoError(CheckoutError):
    """Ação de PIX bloqueada porque o código expirou e não foi renovado."""


class CheckoutNaoEncontradoError(CheckoutError):
    """Checkout inexistente no registro."""

from enum import Enum


class TipoEntregaEnum(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class FormaPagamentoEnum(str, Enum):
    PIX = "pix"
    CARD = "card"


class EtapaCheckout(str, Enum):
    CADASTRO = "cadastro"
    CHECKOUT = "checkout"
    PAGAMENTO = "pagamento"


class EstadoCriacaoPedido(str, Enum):
    NAO_INICIADO = "nao_iniciado"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDO = "concluido"
    FALHOU = "falhou"


class StatusPedidoEnum(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    REJECTED = "rejected"


class StatusPagamentoEnum(str, Enum):
    AGUARDANDO_PAGAMENTO = "aguardando_pagamento"
    PENDENTE_CONFIRMACAO = "pendente_confirmacao"
    PENDENTE = "pendente"
    CONFIRMADO = "confirmado"
    FALHOU = "falhou"


class OrigemTaxaEnum(str, Enum):
    """De onde veio a distância usada no cálculo da taxa."""
    ENDERECO_CLIENTE = "endereco_cliente"
    LOCAL_RETIRADA = "local_retirada"
    GEOCODIFICACAO = "geocodificacao"
    TAXA_MINIMA = "taxa_minima"

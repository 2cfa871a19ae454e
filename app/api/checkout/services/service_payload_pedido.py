from typing import List, Optional

from app.api.checkout.schemas.schema_carrinho import Carrinho, ItemCarrinho
from app.api.checkout.schemas.schema_checkout import DadosCliente, SelecaoCheckout
from app.api.checkout.schemas.schema_endereco import ContextoRestaurante, EnderecoCheckout
from app.api.checkout.schemas.schema_pedido_payload import (
    ClientePedido,
    DadosPedido,
    ItemPedido,
    ModificadorPedido,
    PedidoPayload,
    ResultadoValidacao,
)
from app.api.checkout.schemas.schema_shared_enums import FormaPagamentoEnum, TipoEntregaEnum
from app.api.localizacao.core.mascara_endereco import endereco_mascarado
from app.utils.logger import logger
from app.utils.telefone import normalizar_telefone, somente_digitos, telefone_mascarado

# 55 + DDD + número
MIN_DIGITOS_TELEFONE = 12


def converter_item(item: ItemCarrinho) -> ItemPedido:
    modificadores = [
        ModificadorPedido(modifier_id=grupo_id, option_id=opcao_id)
        for grupo_id, opcoes in item.modificadores_selecionados.items()
        for opcao_id in opcoes
    ]
    return ItemPedido(
        product_id=item.item_cardapio.id,
        quantity=item.quantidade,
        modifiers=modificadores or None,
    )


def validar_endereco(endereco: EnderecoCheckout) -> List[str]:
    """Regras de campo do endereço; campo mascarado não é validado."""
    erros = []
    if not endereco_mascarado(endereco.rua) and len(endereco.rua.strip()) < 3:
        erros.append("Rua inválida (mínimo 3 caracteres)")
    if not endereco_mascarado(endereco.numero) and not endereco.numero.strip():
        erros.append("Número é obrigatório")
    if not endereco_mascarado(endereco.bairro) and len(endereco.bairro.strip()) < 3:
        erros.append("Bairro inválido (mínimo 3 caracteres)")
    if not endereco_mascarado(endereco.cep) and len(somente_digitos(endereco.cep)) != 8:
        erros.append("CEP inválido (deve ter 8 dígitos)")
    return erros


class PayloadPedidoService:
    """Monta o corpo do `POST /order` e valida antes do envio."""

    def construir(
        self,
        cliente: DadosCliente,
        selecao: SelecaoCheckout,
        carrinho: Carrinho,
        contexto: Optional[ContextoRestaurante] = None,
    ) -> PedidoPayload:
        delivery = selecao.tipo_entrega == TipoEntregaEnum.DELIVERY

        endereco = None
        # Retirada com rótulo usa o texto do local do restaurante: não vai no payload
        if delivery and isinstance(selecao.endereco, EnderecoCheckout):
            endereco = selecao.endereco
            if endereco.distancia is None and selecao.distancia_metros is not None:
                endereco = endereco.model_copy(update={"distancia": selecao.distancia_metros})

        payload = PedidoPayload(
            customer=ClientePedido(
                phone=normalizar_telefone(cliente.telefone) or "",
                name=cliente.nome,
                birthdate=cliente.data_nascimento or None,
                address=endereco,
            ),
            order=DadosPedido(
                items=[converter_item(item) for item in carrinho],
                payment_method="pix" if selecao.forma_pagamento == FormaPagamentoEnum.PIX else "credit_card",
                delivery=delivery,
            ),
        )
        logger.debug(
            f"[PayloadPedido] Payload montado{f' para {contexto.id}' if contexto else ''}: "
            f"{len(payload.order.items)} itens, delivery={delivery}"
        )
        return payload

    def validar(self, payload: PedidoPayload) -> ResultadoValidacao:
        erros: List[str] = []

        telefone = payload.customer.phone
        if not telefone:
            erros.append("Telefone inválido")
        elif not telefone_mascarado(telefone):
            if len(somente_digitos(normalizar_telefone(telefone))) < MIN_DIGITOS_TELEFONE:
                erros.append("Telefone inválido")

        if not payload.customer.name or len(payload.customer.name.strip()) < 3:
            erros.append("Nome inválido")

        if payload.customer.address is not None:
            erros.extend(validar_endereco(payload.customer.address))

        if not payload.order.items:
            erros.append("Carrinho vazio")

        for i, item in enumerate(payload.order.items, start=1):
            if not item.product_id or item.product_id <= 0:
                erros.append(f"Item {i}: ID do produto inválido")
            if not item.quantity or item.quantity < 1:
                erros.append(f"Item {i}: Quantidade inválida")

        if erros:
            logger.info(f"[PayloadPedido] Validação falhou: {erros}")
        return ResultadoValidacao(valido=not erros, erros=erros)

"""
Adapter HTTP para a API de pedidos do restaurante.

- `GET  /customer/phone/{phone}`: busca de cliente (404 = não encontrado)
- `POST /order`: criação de pedido; a resposta pode vir direta
  (`{orderId, token, pix}`) ou embrulhada em `{success, data}`.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from app.api.checkout.contracts.api_pedidos_contract import (
    ClienteEncontradoDTO,
    IClienteLookup,
    IPedidoGateway,
    PedidoCriadoDTO,
)
from app.api.checkout.exceptions import ErroConsultaCliente, ErroCriacaoPedido
from app.api.checkout.schemas.schema_endereco import EnderecoCheckout
from app.api.checkout.schemas.schema_pedido_payload import PedidoPayload
from app.config import settings
from app.utils.logger import logger


def _extrair_mensagem_erro(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP error! status: {response.status_code}"

    if isinstance(data, dict):
        erro = data.get("error")
        if isinstance(erro, dict) and erro.get("message"):
            return str(erro["message"])
        for chave in ("message", "detail"):
            if data.get(chave):
                return str(data[chave])
    return f"HTTP error! status: {response.status_code}"


def _desembrulhar(data: Any) -> Dict[str, Any]:
    if isinstance(data, dict) and "data" in data and isinstance(data["data"], dict):
        return data["data"]
    return data if isinstance(data, dict) else {}


class ApiPedidosAdapter(IClienteLookup, IPedidoGateway):
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.API_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _headers(token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def buscar_por_telefone(self, telefone: str, token: Optional[str] = None) -> Optional[ClienteEncontradoDTO]:
        try:
            async with self._client() as client:
                response = await client.get(f"/customer/phone/{telefone}", headers=self._headers(token))
        except httpx.HTTPError as e:
            logger.error(f"[ApiPedidos] Erro de rede ao buscar cliente {telefone}: {e}")
            raise ErroConsultaCliente("Erro ao consultar cliente") from e

        if response.status_code == 404:
            logger.info(f"[ApiPedidos] Cliente {telefone} não encontrado")
            return None
        if response.status_code >= 400:
            mensagem = _extrair_mensagem_erro(response)
            logger.error(f"[ApiPedidos] Erro ao buscar cliente {telefone}: Status {response.status_code} - {mensagem}")
            raise ErroConsultaCliente(mensagem)

        try:
            data = _desembrulhar(response.json())
        except ValueError as e:
            raise ErroConsultaCliente("Resposta inválida da API de clientes") from e
        if not data:
            return None

        endereco = data.get("address")
        return ClienteEncontradoDTO(
            nome=data.get("name") or "",
            telefone=data.get("phone") or telefone,
            endereco=EnderecoCheckout.model_validate(endereco) if isinstance(endereco, dict) else None,
        )

    async def criar_pedido(self, payload: PedidoPayload, token: Optional[str] = None) -> PedidoCriadoDTO:
        corpo = payload.to_wire()
        logger.info(
            f"[ApiPedidos] Criando pedido: {len(corpo['order']['items'])} itens, "
            f"pagamento={corpo['order']['payment_method']}, delivery={corpo['order']['delivery']}"
        )
        try:
            async with self._client() as client:
                response = await client.post("/order", json=corpo, headers=self._headers(token))
        except httpx.TimeoutException as e:
            logger.error(f"[ApiPedidos] Timeout ao criar pedido: {e}")
            raise ErroCriacaoPedido("Tempo esgotado ao processar pedido. Tente novamente.") from e
        except httpx.HTTPError as e:
            logger.error(f"[ApiPedidos] Erro de rede ao criar pedido: {e}")
            raise ErroCriacaoPedido("Erro de conexão ao criar pedido. Tente novamente.") from e

        if response.status_code >= 400:
            mensagem = _extrair_mensagem_erro(response)
            logger.error(f"[ApiPedidos] Erro ao criar pedido: Status {response.status_code} - {mensagem}")
            raise ErroCriacaoPedido(mensagem, status_code=response.status_code)

        try:
            bruto = response.json()
        except ValueError as e:
            raise ErroCriacaoPedido("Resposta inválida da API de pedidos") from e

        if isinstance(bruto, dict) and bruto.get("success") is False:
            erro = bruto.get("error") or {}
            raise ErroCriacaoPedido(erro.get("message") or "Erro ao criar pedido", codigo=erro.get("code"))

        data = _desembrulhar(bruto)
        if data.get("orderId") is None or not data.get("token"):
            raise ErroCriacaoPedido("Resposta da API de pedidos sem orderId ou token")

        pix = data.get("pix") or {}
        logger.info(f"[ApiPedidos] Pedido criado: {data['orderId']}")
        return PedidoCriadoDTO(
            pedido_id=str(data["orderId"]),
            token=data["token"],
            codigo_pix=pix.get("copyAndPaste"),
        )

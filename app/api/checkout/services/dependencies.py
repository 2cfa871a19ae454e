import time
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, List, Optional

from fastapi import Depends, Request, Response

from app.api.checkout.adapters.api_pedidos_adapter import ApiPedidosAdapter
from app.api.checkout.adapters.estado_cliente_adapter import PedidoLocalAdapter, SessaoClienteAdapter
from app.api.checkout.contracts.api_pedidos_contract import IClienteLookup, IPedidoGateway
from app.api.checkout.contracts.estado_cliente_contract import IPedidoLocalStore, ISessaoClienteStore
from app.api.checkout.exceptions import CheckoutNaoEncontradoError
from app.api.checkout.services.service_orquestrador import OrquestradorCheckout
from app.api.checkout.services.service_taxa_entrega import TaxaEntregaService
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.services.dependencies import get_distancia_service
from app.config import settings
from app.utils.logger import logger


@dataclass
class _EntradaCheckout:
    dispositivo_id: str
    orquestrador: OrquestradorCheckout
    ultimo_acesso: float


class RegistroCheckouts:
    """
    Checkouts ativos em memória, cada um preso ao dispositivo que o criou.

    Entradas ociosas por mais de `ttl_segundos` são desmontadas e removidas;
    checkouts com pedido concluído usam o TTL curto. A limpeza roda a cada
    criação ou leitura de checkout.
    """

    def __init__(
        self,
        *,
        ttl_segundos: Optional[float] = None,
        ttl_concluido_segundos: Optional[float] = None,
        relogio: Callable[[], float] = time.monotonic,
    ):
        self.ttl_segundos = settings.CHECKOUT_TTL_SEGUNDOS if ttl_segundos is None else ttl_segundos
        self.ttl_concluido_segundos = (
            settings.CHECKOUT_CONCLUIDO_TTL_SEGUNDOS if ttl_concluido_segundos is None else ttl_concluido_segundos
        )
        self._relogio = relogio
        self._checkouts: Dict[str, _EntradaCheckout] = {}

    def adicionar(self, dispositivo_id: str, orquestrador: OrquestradorCheckout) -> str:
        self.expirar()
        checkout_id = uuid.uuid4().hex
        self._checkouts[checkout_id] = _EntradaCheckout(dispositivo_id, orquestrador, self._relogio())
        logger.info(f"[Checkout] Checkout {checkout_id} criado para o dispositivo {dispositivo_id}")
        return checkout_id

    def obter(self, checkout_id: str, dispositivo_id: str) -> OrquestradorCheckout:
        self.expirar()
        entrada = self._checkouts.get(checkout_id)
        if entrada is None or entrada.dispositivo_id != dispositivo_id:
            raise CheckoutNaoEncontradoError(f"Checkout {checkout_id} não encontrado")
        entrada.ultimo_acesso = self._relogio()
        return entrada.orquestrador

    def remover(self, checkout_id: str) -> Optional[OrquestradorCheckout]:
        entrada = self._checkouts.pop(checkout_id, None)
        if entrada is None:
            return None
        entrada.orquestrador.desmontar()
        return entrada.orquestrador

    def expirar(self) -> List[str]:
        """Remove checkouts ociosos além do TTL. Retorna os ids removidos."""
        agora = self._relogio()
        expirados = []
        for checkout_id, entrada in list(self._checkouts.items()):
            ttl = self.ttl_concluido_segundos if entrada.orquestrador.pedido_concluido_id else self.ttl_segundos
            if agora - entrada.ultimo_acesso > ttl:
                self.remover(checkout_id)
                expirados.append(checkout_id)
        if expirados:
            logger.info(f"[Checkout] {len(expirados)} checkout(s) expirado(s) removido(s) do registro")
        return expirados

    def ids(self) -> List[str]:
        return list(self._checkouts)

    def __len__(self):
        return len(self._checkouts)


@lru_cache(maxsize=1)
def _get_registro_instance() -> RegistroCheckouts:
    return RegistroCheckouts()


def get_registro_checkouts() -> RegistroCheckouts:
    return _get_registro_instance()


@lru_cache(maxsize=1)
def _get_api_pedidos_adapter_instance() -> ApiPedidosAdapter:
    return ApiPedidosAdapter()


def get_cliente_lookup() -> IClienteLookup:
    return _get_api_pedidos_adapter_instance()


def get_pedido_gateway() -> IPedidoGateway:
    return _get_api_pedidos_adapter_instance()


def get_sessao_store() -> ISessaoClienteStore:
    return SessaoClienteAdapter()


def get_pedido_store() -> IPedidoLocalStore:
    return PedidoLocalAdapter()


def get_taxa_entrega_service(
    distancia_service: IDistanciaService = Depends(get_distancia_service),
) -> TaxaEntregaService:
    return TaxaEntregaService(distancia_service)


def get_dispositivo_id(request: Request, response: Response) -> str:
    """Identificador do navegador (cookie). Criado na primeira requisição."""
    dispositivo_id = request.cookies.get(settings.DISPOSITIVO_COOKIE)
    if not dispositivo_id:
        dispositivo_id = uuid.uuid4().hex
        response.set_cookie(
            settings.DISPOSITIVO_COOKIE,
            dispositivo_id,
            max_age=settings.CUSTOMER_TOKEN_EXPIRY_DAYS * 24 * 60 * 60,
            httponly=True,
            samesite="strict",
        )
    return dispositivo_id

"""
Implementações SQLAlchemy dos contratos de estado do cliente.

Os checkouts vivem em memória entre requisições, então cada operação abre a
própria sessão do banco a partir da fábrica (por padrão `SessionLocal`).
"""
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app.api.checkout.contracts.estado_cliente_contract import IPedidoLocalStore, ISessaoClienteStore
from app.api.checkout.models.model_pedido_local import PedidoLocalModel
from app.api.checkout.models.model_sessao_cliente import SessaoClienteModel
from app.api.checkout.repositories.repo_pedido_local import PedidoLocalRepository
from app.api.checkout.repositories.repo_sessao_cliente import SessaoClienteRepository
from app.api.checkout.schemas.schema_checkout import PedidoLocal, SessaoCliente
from app.api.checkout.schemas.schema_endereco import EnderecoCheckout
from app.api.checkout.schemas.schema_shared_enums import StatusPagamentoEnum
from app.config import settings
from app.database.db_connection import SessionLocal
from app.utils.database_utils import expiracao_em_dias


class SessaoClienteAdapter(ISessaoClienteStore):
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    @staticmethod
    def _to_schema(m: SessaoClienteModel) -> SessaoCliente:
        return SessaoCliente(
            token=m.token,
            nome=m.nome,
            telefone=m.telefone,
            endereco=EnderecoCheckout.model_validate(m.endereco) if m.endereco else None,
            autenticado=bool(m.autenticado),
        )

    def carregar(self, dispositivo_id: str) -> Optional[SessaoCliente]:
        with self.session_factory() as db:
            m = SessaoClienteRepository(db).get_by_dispositivo(dispositivo_id)
            return self._to_schema(m) if m else None

    def salvar(self, dispositivo_id: str, sessao: SessaoCliente) -> None:
        with self.session_factory() as db:
            SessaoClienteRepository(db).upsert(
                dispositivo_id,
                token=sessao.token,
                nome=sessao.nome,
                telefone=sessao.telefone,
                endereco=sessao.endereco.model_dump(mode="json") if sessao.endereco else None,
                autenticado=sessao.autenticado,
                token_expira_em=expiracao_em_dias(settings.CUSTOMER_TOKEN_EXPIRY_DAYS) if sessao.token else None,
            )

    def remover(self, dispositivo_id: str) -> None:
        with self.session_factory() as db:
            SessaoClienteRepository(db).delete(dispositivo_id)


class PedidoLocalAdapter(IPedidoLocalStore):
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    @staticmethod
    def _to_schema(m: PedidoLocalModel) -> PedidoLocal:
        return PedidoLocal.model_validate(m)

    def adicionar(self, dispositivo_id: str, pedido: PedidoLocal) -> None:
        dados = pedido.model_dump(exclude={"created_at"})
        dados["itens"] = [i.model_dump(mode="json") for i in pedido.itens]
        dados["tipo_entrega"] = pedido.tipo_entrega.value
        dados["status"] = pedido.status.value
        dados["forma_pagamento"] = pedido.forma_pagamento.value
        dados["status_pagamento"] = pedido.status_pagamento.value
        with self.session_factory() as db:
            PedidoLocalRepository(db).create(dispositivo_id=dispositivo_id, **dados)

    def atualizar_status_pagamento(self, pedido_id: str, status: StatusPagamentoEnum) -> Optional[PedidoLocal]:
        with self.session_factory() as db:
            repo = PedidoLocalRepository(db)
            m = repo.get_by_id(pedido_id)
            if m is None:
                return None
            return self._to_schema(repo.update(m, status_pagamento=status.value))

    def listar(self, dispositivo_id: str) -> List[PedidoLocal]:
        with self.session_factory() as db:
            return [self._to_schema(m) for m in PedidoLocalRepository(db).list_by_dispositivo(dispositivo_id)]

    def obter(self, pedido_id: str) -> Optional[PedidoLocal]:
        with self.session_factory() as db:
            m = PedidoLocalRepository(db).get_by_id(pedido_id)
            return self._to_schema(m) if m else None

from sqlalchemy import Column, String, DateTime, JSON, Numeric, Index

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class PedidoLocalModel(Base):
    """Histórico local dos pedidos criados a partir deste dispositivo."""
    __tablename__ = "pedidos_locais"
    __table_args__ = (
        Index("idx_pedidos_locais_dispositivo", "dispositivo_id"),
    )

    id = Column(String(40), primary_key=True)  # order-<timestamp ms>
    dispositivo_id = Column(String(64), nullable=False)
    api_pedido_id = Column(String(64), nullable=False)
    api_token = Column(String, nullable=False)
    itens = Column(JSON, nullable=False, default=list)
    cliente_nome = Column(String(100), nullable=False)
    cliente_telefone = Column(String(20), nullable=False)
    tipo_entrega = Column(String(10), nullable=False)
    endereco = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    valor_total = Column(Numeric(18, 2), nullable=False)
    taxa_entrega = Column(Numeric(18, 2), nullable=False, default=0)
    forma_pagamento = Column(String(10), nullable=False)
    status_pagamento = Column(String(30), nullable=False)
    codigo_pix = Column(String, nullable=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

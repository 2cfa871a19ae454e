from sqlalchemy import Column, String, Boolean, DateTime, JSON, Index

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class SessaoClienteModel(Base):
    """Sessão do cliente por dispositivo (cookie `dispositivo_id`)."""
    __tablename__ = "sessoes_cliente"
    __table_args__ = (
        Index("idx_sessoes_cliente_token", "token"),
    )

    dispositivo_id = Column(String(64), primary_key=True)
    token = Column(String, nullable=True)
    nome = Column(String(100), nullable=True)
    telefone = Column(String(20), nullable=True)
    endereco = Column(JSON, nullable=True)
    autenticado = Column(Boolean, default=False, nullable=False)
    token_expira_em = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

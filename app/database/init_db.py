from sqlalchemy import inspect

from .db_connection import engine, Base
from app.utils.logger import logger

TABELAS = ["sessoes_cliente", "pedidos_locais"]


def importar_models():
    """Importa os models para registrá-los no metadata antes do create_all."""
    from app.api.checkout.models.model_sessao_cliente import SessaoClienteModel  # noqa: F401
    from app.api.checkout.models.model_pedido_local import PedidoLocalModel  # noqa: F401


def verificar_banco_inicializado() -> bool:
    """Verifica se as tabelas do checkout já existem."""
    existentes = set(inspect(engine).get_table_names())
    return all(t in existentes for t in TABELAS)


def criar_tabelas():
    importar_models()
    Base.metadata.create_all(bind=engine)


def inicializar_banco():
    if verificar_banco_inicializado():
        logger.info("[DB] Banco já inicializado.")
        return
    logger.info("[DB] Criando tabelas do checkout...")
    criar_tabelas()
    logger.info("[DB] Tabelas criadas com sucesso.")

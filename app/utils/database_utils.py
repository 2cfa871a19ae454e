from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

TZ_SP = ZoneInfo('America/Sao_Paulo')


def now_trimmed():
    """Retorna datetime atual em timezone de São Paulo, sem microsegundos"""
    return datetime.now(TZ_SP).replace(microsecond=0)


def expiracao_em_dias(dias: int) -> datetime:
    """Data de expiração a partir de agora (usada no token do cliente)."""
    return now_trimmed() + timedelta(days=dias)


def gerar_id_pedido_local() -> str:
    """ID local do pedido no formato `order-<timestamp em ms>`."""
    return f"order-{int(datetime.now(TZ_SP).timestamp() * 1000)}"

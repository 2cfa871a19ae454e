from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

from app.utils.logger import logger

DEFAULT_DEBOUNCE_SECONDS = 0.5


@dataclass
class _Agendamento:
    valor: Hashable
    tarefa: asyncio.Task


class Debouncer:
    """
    Agenda chamadas assíncronas com debounce por campo.

    - Uma nova chamada para o mesmo campo cancela a pendente (só a última executa).
    - O valor normalizado da última chamada é memorizado: reagendar com o mesmo
      valor é ignorado, evitando consultas repetidas para a mesma entrada.
    """

    def __init__(self, atraso_segundos: float = DEFAULT_DEBOUNCE_SECONDS):
        self.atraso_segundos = atraso_segundos
        self._pendentes: Dict[str, _Agendamento] = {}
        self._ultimo_valor: Dict[str, Hashable] = {}

    def agendar(
        self,
        campo: str,
        valor: Hashable,
        acao: Callable[[Any], Awaitable[Any]],
    ) -> bool:
        """Retorna False quando o valor é o mesmo já agendado/executado para o campo."""
        if self._ultimo_valor.get(campo) == valor:
            return False

        self.cancelar(campo)
        self._ultimo_valor[campo] = valor

        async def _disparar():
            await asyncio.sleep(self.atraso_segundos)
            try:
                return await acao(valor)
            finally:
                atual = self._pendentes.get(campo)
                if atual is not None and atual.tarefa is asyncio.current_task():
                    self._pendentes.pop(campo, None)

        tarefa = asyncio.get_running_loop().create_task(_disparar())
        self._pendentes[campo] = _Agendamento(valor=valor, tarefa=tarefa)
        return True

    def cancelar(self, campo: Optional[str] = None) -> None:
        campos = [campo] if campo is not None else list(self._pendentes)
        for c in campos:
            agendamento = self._pendentes.pop(c, None)
            if agendamento and not agendamento.tarefa.done():
                agendamento.tarefa.cancel()
                logger.debug(f"[Debounce] Agendamento cancelado para '{c}'")

    def esquecer(self, campo: str) -> None:
        """Cancela o pendente e libera o campo para consultar o mesmo valor de novo."""
        self.cancelar(campo)
        self._ultimo_valor.pop(campo, None)

    def pendente(self, campo: str) -> bool:
        agendamento = self._pendentes.get(campo)
        return agendamento is not None and not agendamento.tarefa.done()

    async def aguardar(self, campo: str) -> Any:
        """Aguarda o agendamento pendente do campo (se houver) e devolve o resultado."""
        agendamento = self._pendentes.get(campo)
        if agendamento is None:
            return None
        await asyncio.wait({agendamento.tarefa})
        if agendamento.tarefa.cancelled():
            return None
        return agendamento.tarefa.result()

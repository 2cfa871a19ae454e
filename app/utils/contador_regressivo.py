from __future__ import annotations

import asyncio
from typing import Callable, Optional

from app.utils.logger import logger


class ContadorRegressivo:
    """
    Contador regressivo com um único tick periódico (padrão: 1 segundo).

    Independente de UI: quem consome lê `restante`/`expirado` ou registra
    `ao_expirar`. O tick para sozinho ao expirar ou em `parar()`.
    """

    def __init__(
        self,
        duracao_segundos: int,
        *,
        intervalo_tick: float = 1.0,
        ao_expirar: Optional[Callable[[], None]] = None,
    ):
        self.duracao_segundos = duracao_segundos
        self.intervalo_tick = intervalo_tick
        self.ao_expirar = ao_expirar
        self.restante = duracao_segundos
        self.expirado = False
        self._tarefa: Optional[asyncio.Task] = None

    @property
    def ativo(self) -> bool:
        return self._tarefa is not None and not self._tarefa.done()

    def iniciar(self) -> None:
        if self.ativo or self.expirado:
            return
        self._tarefa = asyncio.get_running_loop().create_task(self._loop())

    def parar(self) -> None:
        if self._tarefa is not None and not self._tarefa.done():
            self._tarefa.cancel()
        self._tarefa = None

    def reiniciar(self) -> None:
        """Volta ao tempo cheio e recomeça a contagem."""
        self.parar()
        self.restante = self.duracao_segundos
        self.expirado = False
        self.iniciar()

    def tick(self) -> None:
        if self.expirado:
            return
        if self.restante <= 1:
            self.restante = 0
            self.expirado = True
            logger.info("[Contador] Tempo esgotado")
            if self.ao_expirar:
                self.ao_expirar()
            return
        self.restante -= 1

    def formatado(self) -> str:
        minutos, segundos = divmod(self.restante, 60)
        return f"{minutos}:{segundos:02d}"

    async def _loop(self) -> None:
        while not self.expirado:
            await asyncio.sleep(self.intervalo_tick)
            self.tick()

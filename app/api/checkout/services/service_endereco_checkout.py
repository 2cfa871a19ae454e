"""
Edição do endereço de entrega no checkout.

Cada alteração de campo é sanitizada; o CEP completo dispara a busca no
ViaCEP e o endereço completo (rua, número, bairro e CEP) dispara o cálculo de
distância até o restaurante. As duas consultas passam pelo debounce: só a
última agendada por campo executa, e o mesmo valor não é consultado duas vezes.
"""
from __future__ import annotations

import re
from typing import List, Optional

from app.api.checkout.schemas.schema_endereco import ContextoRestaurante, EnderecoCheckout
from app.api.checkout.services.service_payload_pedido import validar_endereco
from app.api.localizacao.contracts.geolocalizacao_contract import IDistanciaService
from app.api.localizacao.exceptions import LocalizacaoError
from app.api.localizacao.services.service_cep import CepService, preencher_campos_vazios
from app.config import settings
from app.utils.debounce import Debouncer
from app.utils.logger import logger
from app.utils.viacep_client import cep_valido, formatar_cep, limpar_cep

CAMPOS_EDITAVEIS = ("rua", "numero", "bairro", "cep", "complemento")

_CARACTERES_PROIBIDOS = re.compile(r"[<>\"'`]")


def sanitizar(valor: Optional[str]) -> str:
    return _CARACTERES_PROIBIDOS.sub("", valor or "")


class EditorEndereco:
    def __init__(
        self,
        contexto: ContextoRestaurante,
        cep_service: CepService,
        distancia_service: Optional[IDistanciaService] = None,
        *,
        endereco: Optional[EnderecoCheckout] = None,
        debouncer: Optional[Debouncer] = None,
    ):
        self.contexto = contexto
        self.cep_service = cep_service
        self.distancia_service = distancia_service
        self.endereco = endereco.model_copy() if endereco else EnderecoCheckout()
        self.debouncer = debouncer or Debouncer(settings.DEBOUNCE_SECONDS)
        self.avisos: List[str] = []
        self.buscando_cep = False
        self.calculando_distancia = False

    def alterar_campo(self, campo: str, valor: Optional[str]) -> EnderecoCheckout:
        if campo not in CAMPOS_EDITAVEIS:
            raise ValueError(f"Campo de endereço desconhecido: {campo}")

        limpo = sanitizar(valor)
        if campo == "cep":
            limpo = formatar_cep(limpo)

        if getattr(self.endereco, campo) == limpo:
            return self.endereco

        atualizacao = {campo: limpo}
        # A distância conhecida era do endereço anterior
        if campo != "complemento":
            atualizacao["distancia"] = None
        self.endereco = self.endereco.model_copy(update=atualizacao)

        if campo == "cep" and cep_valido(limpo):
            self.debouncer.agendar("cep", limpar_cep(limpo), self._buscar_cep)
        self._agendar_distancia()
        return self.endereco

    def _agendar_distancia(self) -> None:
        if self.distancia_service is None or self.contexto.local_retirada is None:
            return
        if not self.endereco.completo() or self.endereco.esta_mascarado():
            return
        self.debouncer.agendar("distancia", self.endereco.para_geocodificacao(), self._calcular_distancia)

    async def _buscar_cep(self, cep: str) -> None:
        self.buscando_cep = True
        try:
            resultado = await self.cep_service.buscar(cep)
        finally:
            self.buscando_cep = False

        if resultado.aviso:
            self.avisos.append(resultado.aviso)
            return

        rua, bairro = preencher_campos_vazios(self.endereco.rua, self.endereco.bairro, resultado)
        if (rua, bairro) != (self.endereco.rua, self.endereco.bairro):
            self.endereco = self.endereco.model_copy(update={"rua": rua or "", "bairro": bairro or ""})
            logger.info(f"[EnderecoCheckout] Endereço preenchido pelo CEP {cep}")
            self._agendar_distancia()

    async def _calcular_distancia(self, destino: str) -> None:
        origem = self.contexto.local_retirada.endereco or self.contexto.local_retirada.descricao
        self.calculando_distancia = True
        try:
            resultado = await self.distancia_service.calcular_distancia(
                origem, destino, cidade=self.contexto.cidade, estado=self.contexto.estado
            )
        except LocalizacaoError as e:
            logger.warning(f"[EnderecoCheckout] Distância não calculada: {e}")
            self.avisos.append(str(e))
            return
        finally:
            self.calculando_distancia = False

        # O endereço pode ter mudado enquanto o cálculo rodava
        if self.endereco.para_geocodificacao() == destino:
            self.endereco = self.endereco.model_copy(update={"distancia": resultado.distancia_metros})
        self.avisos.extend(resultado.avisos)

    async def aguardar(self) -> EnderecoCheckout:
        """Espera as consultas pendentes assentarem (CEP primeiro, pois pode agendar a distância)."""
        await self.debouncer.aguardar("cep")
        await self.debouncer.aguardar("distancia")
        return self.endereco

    def validar(self) -> List[str]:
        return validar_endereco(self.endereco)

    def consumir_avisos(self) -> List[str]:
        avisos, self.avisos = self.avisos, []
        return avisos

    def fechar(self) -> None:
        self.debouncer.cancelar()

"""
Cadastro / identificação do cliente em duas etapas.

Etapa 1: telefone. Com 11 dígitos a busca por telefone roda sozinha (com
debounce e uma única vez por número); cliente encontrado conclui o cadastro
direto. Não encontrado, ou erro na busca, leva à etapa 2 (nome e data de
nascimento).
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Callable, Dict, Optional

from app.api.checkout.contracts.api_pedidos_contract import ClienteEncontradoDTO, IClienteLookup
from app.api.checkout.exceptions import ErroConsultaCliente, TransicaoInvalidaError
from app.api.checkout.schemas.schema_checkout import DadosCliente
from app.api.checkout.services.service_endereco_checkout import sanitizar
from app.config import settings
from app.utils.debounce import Debouncer
from app.utils.logger import logger
from app.utils.telefone import celular_completo, formatar_telefone, normalizar_telefone, validar_telefone

_NOME_VALIDO = re.compile(r"^[a-zA-ZÀ-ÿ\s]+$")

AoConcluir = Callable[[DadosCliente, Optional[ClienteEncontradoDTO]], None]


def validar_nome(nome: Optional[str]) -> str:
    """Retorna a mensagem de erro ou string vazia quando o nome é válido."""
    nome = (nome or "").strip()
    if not nome:
        return "Nome é obrigatório"
    if len(nome) < 3:
        return "Nome deve ter pelo menos 3 caracteres"
    if len(nome) > 100:
        return "Nome muito longo (máximo 100 caracteres)"
    if not _NOME_VALIDO.match(nome):
        return "Nome deve conter apenas letras e espaços"
    partes = nome.split()
    if len(partes) < 2:
        return "Informe nome e sobrenome"
    if any(len(p) < 2 for p in partes):
        return "Cada parte do nome deve ter pelo menos 2 letras"
    return ""


def validar_data_nascimento(valor: Optional[str], hoje: Optional[date] = None) -> str:
    """Data opcional no formato YYYY-MM-DD; idade entre 0 e 120 anos."""
    if not valor:
        return ""
    try:
        nascimento = datetime.strptime(valor, "%Y-%m-%d").date()
    except ValueError:
        return "Data de nascimento inválida"
    idade = (hoje or date.today()).year - nascimento.year
    if idade < 0 or idade > 120:
        return "Data de nascimento inválida"
    return ""


class CadastroService:
    def __init__(
        self,
        cliente_lookup: IClienteLookup,
        ao_concluir: AoConcluir,
        *,
        debouncer: Optional[Debouncer] = None,
        token: Optional[str] = None,
    ):
        self.cliente_lookup = cliente_lookup
        self.token = token
        self.ao_concluir = ao_concluir
        self.debouncer = debouncer or Debouncer(settings.DEBOUNCE_SECONDS)
        self.etapa = 1
        self.telefone = ""
        self.nome = ""
        self.data_nascimento = ""
        self.erros: Dict[str, str] = {}
        self.consultando_telefone = False
        self.concluido = False
        self.mensagem: Optional[str] = None

    def alterar_telefone(self, valor: str) -> str:
        self._exigir_etapa(1)
        self.telefone = formatar_telefone(valor)
        if self.erros.get("telefone"):
            self.erros["telefone"] = validar_telefone(self.telefone)

        if celular_completo(self.telefone):
            self.debouncer.agendar("telefone", normalizar_telefone(self.telefone), self._consultar)
        else:
            # Número incompleto libera nova busca quando voltar a ficar completo
            self.debouncer.esquecer("telefone")
        return self.telefone

    async def enviar_telefone(self) -> None:
        """Botão "Continuar" da etapa 1. Busca o cliente se ainda não buscou este número."""
        self._exigir_etapa(1)
        erro = validar_telefone(self.telefone)
        if erro:
            self.erros["telefone"] = erro
            return
        self.erros.pop("telefone", None)

        agendado = self.debouncer.agendar("telefone", normalizar_telefone(self.telefone), self._consultar)
        if agendado or self.debouncer.pendente("telefone"):
            await self.debouncer.aguardar("telefone")
        elif not self.concluido:
            # Número já consultado sem cadastro
            self._ir_para_etapa_2()

    async def aguardar(self) -> None:
        await self.debouncer.aguardar("telefone")

    async def _consultar(self, telefone: str) -> None:
        self.consultando_telefone = True
        try:
            cliente = await self.cliente_lookup.buscar_por_telefone(telefone, self.token)
        except ErroConsultaCliente as e:
            logger.error(f"[Cadastro] Erro ao buscar cliente {telefone}: {e}")
            self._ir_para_etapa_2()
            return
        finally:
            self.consultando_telefone = False

        if cliente is None:
            logger.info(f"[Cadastro] Telefone {telefone} sem cadastro; seguindo para etapa 2")
            self._ir_para_etapa_2()
            return

        if cliente.endereco is not None:
            self.mensagem = f"Encontramos seu cadastro e endereço, {cliente.nome}!"
        else:
            self.mensagem = f"Encontramos seu cadastro, {cliente.nome}!"
        self.concluido = True
        self.ao_concluir(
            DadosCliente(telefone=self.telefone, nome=cliente.nome, cliente_existente=True),
            cliente,
        )

    def _ir_para_etapa_2(self) -> None:
        if self.etapa != 2:
            self.mensagem = "Novo cliente! Por favor, preencha seus dados."
        self.etapa = 2

    def enviar_cadastro(self, nome: str, data_nascimento: Optional[str] = None) -> bool:
        """Etapa 2. Retorna False e preenche `erros` quando os dados são inválidos."""
        self._exigir_etapa(2)
        self.nome = sanitizar(nome)[:100]
        self.data_nascimento = data_nascimento or ""

        erros = {}
        erro_nome = validar_nome(self.nome)
        if erro_nome:
            erros["nome"] = erro_nome
        erro_data = validar_data_nascimento(self.data_nascimento)
        if erro_data:
            erros["data_nascimento"] = erro_data
        self.erros = erros
        if erros:
            return False

        self.concluido = True
        self.ao_concluir(
            DadosCliente(
                telefone=self.telefone,
                nome=self.nome.strip(),
                data_nascimento=self.data_nascimento or None,
                cliente_existente=False,
            ),
            None,
        )
        return True

    def voltar_etapa(self) -> None:
        """Da etapa 2 para a 1, mantendo o telefone digitado."""
        self._exigir_etapa(2)
        self.etapa = 1
        self.nome = ""
        self.data_nascimento = ""
        self.erros = {}

    def fechar(self) -> None:
        self.debouncer.cancelar()

    def _exigir_etapa(self, etapa: int) -> None:
        if self.concluido:
            raise TransicaoInvalidaError("Cadastro já concluído")
        if self.etapa != etapa:
            raise TransicaoInvalidaError(f"Ação disponível apenas na etapa {etapa} do cadastro")

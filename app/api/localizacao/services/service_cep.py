from typing import Optional, Tuple

from app.api.localizacao.exceptions import ProvedorIndisponivelError
from app.api.localizacao.models.resultado_cep import ResultadoCep
from app.utils.logger import logger
from app.utils.viacep_client import ViaCepClient, cep_valido, formatar_cep, limpar_cep

AVISO_CEP_NAO_ENCONTRADO = "CEP não encontrado. Preencha manualmente."
AVISO_CEP_INDISPONIVEL = "Erro ao buscar CEP. Preencha manualmente."


class CepService:
    """
    Busca de CEP que nunca levanta exceção para o chamador.

    CEP inexistente e falha do ViaCEP viram aviso no resultado; o endereço
    digitado pelo cliente continua valendo.
    """

    def __init__(self, client: Optional[ViaCepClient] = None):
        self.client = client or ViaCepClient()

    async def buscar(self, cep: str) -> ResultadoCep:
        cep_limpo = limpar_cep(cep)
        if not cep_valido(cep_limpo):
            return ResultadoCep(cep=cep_limpo, aviso="CEP deve ter 8 dígitos")

        try:
            dados = await self.client.buscar_cep(cep_limpo)
        except ProvedorIndisponivelError as e:
            logger.warning(f"[CEP] Falha ao consultar {cep_limpo}: {e}")
            return ResultadoCep(cep=formatar_cep(cep_limpo), aviso=AVISO_CEP_INDISPONIVEL)

        if dados is None:
            return ResultadoCep(cep=formatar_cep(cep_limpo), aviso=AVISO_CEP_NAO_ENCONTRADO)

        return ResultadoCep(
            cep=formatar_cep(cep_limpo),
            encontrado=True,
            rua=dados.logradouro or None,
            bairro=dados.bairro or None,
            cidade=dados.localidade or None,
            estado=dados.uf or None,
        )


def preencher_campos_vazios(
    rua: Optional[str],
    bairro: Optional[str],
    resultado: ResultadoCep,
) -> Tuple[Optional[str], Optional[str]]:
    """Completa rua e bairro com o resultado do CEP sem sobrescrever o que já foi digitado."""
    if not resultado.encontrado:
        return rua, bairro
    nova_rua = rua if rua and rua.strip() else (resultado.rua or rua)
    novo_bairro = bairro if bairro and bairro.strip() else (resultado.bairro or bairro)
    return nova_rua, novo_bairro

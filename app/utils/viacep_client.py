from pydantic import BaseModel
from typing import Optional
import httpx
import re

from app.api.localizacao.exceptions import ProvedorIndisponivelError
from app.config import settings
from app.utils.logger import logger


class ViaCepResponse(BaseModel):
    cep: str
    logradouro: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    localidade: Optional[str] = None
    uf: Optional[str] = None
    ibge: Optional[str] = None
    ddd: Optional[str] = None
    erro: Optional[bool] = None


def limpar_cep(cep: Optional[str]) -> str:
    """Remove caracteres não numéricos do CEP"""
    return re.sub(r'\D', '', cep or "")


def cep_valido(cep: Optional[str]) -> bool:
    """Valida se o CEP tem exatamente 8 dígitos (com ou sem hífen)"""
    return len(limpar_cep(cep)) == 8


def formatar_cep(cep: str) -> str:
    """12345678 -> 12345-678 (aceita CEP parcial enquanto digita)"""
    numeros = limpar_cep(cep)[:8]
    if len(numeros) > 5:
        return f"{numeros[:5]}-{numeros[5:]}"
    return numeros


class ViaCepClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.VIACEP_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def buscar_cep(self, cep: str) -> Optional[ViaCepResponse]:
        """
        Busca o endereço pelo CEP na API do ViaCEP.

        Retorna None quando o CEP é inválido ou não existe (`{"erro": true}`).
        Levanta ProvedorIndisponivelError em falha de rede ou status HTTP de erro,
        para que o chamador diferencie "não encontrado" de "serviço fora".
        """
        if not cep_valido(cep):
            return None

        cep_limpo = limpar_cep(cep)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/{cep_limpo}/json/")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[ViaCEP] Erro na API: {e.response.status_code}")
            raise ProvedorIndisponivelError(f"ViaCEP respondeu {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[ViaCEP] Erro ao consultar CEP {cep_limpo}: {e}")
            raise ProvedorIndisponivelError("Erro ao consultar o ViaCEP") from e

        if data.get("erro"):
            logger.info(f"[ViaCEP] CEP {cep_limpo} não encontrado")
            return None

        return ViaCepResponse(**data)

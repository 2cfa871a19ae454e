from pydantic import BaseModel
from typing import Optional


class ResultadoCep(BaseModel):
    """Resultado da busca de CEP já convertido em campos de endereço."""
    cep: str
    encontrado: bool = False
    rua: Optional[str] = None
    bairro: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    aviso: Optional[str] = None

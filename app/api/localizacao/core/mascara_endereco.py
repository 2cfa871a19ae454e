"""
Política de endereço mascarado.

O backend devolve o endereço de um cliente recorrente com partes ocultas
(ex.: `Rua A, 12*`, `Av. Brasil...`) até a confirmação completa. Esse texto
não pode ir para a geocodificação nem servir de base para a taxa de entrega.
"""
from typing import Any, Iterable, Optional

MARCADORES_MASCARA = ("*", "...")


def endereco_mascarado(texto: Optional[str]) -> bool:
    """True se o texto contém `*` ou a sequência literal `...`."""
    if not texto:
        return False
    return any(marcador in texto for marcador in MARCADORES_MASCARA)


def campos_mascarados(endereco: Any, campos: Iterable[str]) -> list[str]:
    """Lista os campos do endereço (objeto ou dict) que estão mascarados."""
    mascarados = []
    for campo in campos:
        valor = endereco.get(campo) if isinstance(endereco, dict) else getattr(endereco, campo, None)
        if isinstance(valor, str) and endereco_mascarado(valor):
            mascarados.append(campo)
    return mascarados

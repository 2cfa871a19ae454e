import re
from typing import Optional

CODIGO_PAIS = "55"
DIGITOS_CELULAR = 11

_MARCADORES_MASCARA = ("*", "...")


def somente_digitos(valor: Optional[str]) -> str:
    return re.sub(r"\D", "", valor or "")


def telefone_mascarado(telefone: Optional[str]) -> bool:
    """Telefone devolvido pelo backend com parte oculta (ex.: `(67) *****-9999`)."""
    if not telefone:
        return False
    return any(m in telefone for m in _MARCADORES_MASCARA)


def normalizar_telefone(telefone: Optional[str]) -> Optional[str]:
    """
    Remove a máscara e garante o prefixo do país (55).

    (67) 99999-9999 -> 5567999999999

    Telefone mascarado é devolvido sem alteração: o backend resolve o número
    real pelo token da sessão.
    """
    if telefone is None:
        return None
    if telefone_mascarado(telefone):
        return telefone

    digitos = somente_digitos(telefone)
    if not digitos:
        return digitos
    if digitos.startswith(CODIGO_PAIS):
        return digitos
    return CODIGO_PAIS + digitos


def formatar_telefone(valor: str) -> str:
    """Aplica a máscara (XX) XXXXX-XXXX enquanto o cliente digita."""
    numeros = somente_digitos(valor)[:DIGITOS_CELULAR]
    if len(numeros) <= 2:
        return numeros
    if len(numeros) <= 7:
        return f"({numeros[:2]}) {numeros[2:]}"
    return f"({numeros[:2]}) {numeros[2:7]}-{numeros[7:]}"


def validar_telefone(telefone: Optional[str]) -> str:
    """Retorna a mensagem de erro ou string vazia quando o telefone é válido."""
    numeros = somente_digitos(telefone)
    if not numeros:
        return "Telefone é obrigatório"
    if len(numeros) < 10:
        return "Telefone incompleto (mínimo 10 dígitos)"
    if len(numeros) > DIGITOS_CELULAR:
        return "Telefone inválido"
    return ""


def celular_completo(telefone: Optional[str]) -> bool:
    return len(somente_digitos(telefone)) == DIGITOS_CELULAR

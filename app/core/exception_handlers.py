"""
Exception handlers globais para capturar e logar erros da API.
"""
import json
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.checkout.exceptions import (
    CheckoutError,
    CheckoutNaoEncontradoError,
    ErroConsultaCliente,
    ErroCriacaoPedido,
    PagamentoExpiradoError,
    PayloadInvalidoError,
    TransicaoInvalidaError,
)
from app.api.localizacao.exceptions import (
    EnderecoMascaradoError,
    GeocodificacaoError,
    LocalizacaoError,
    ProvedorIndisponivelError,
)
from app.utils.logger import logger

STATUS_POR_ERRO = {
    PayloadInvalidoError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErroCriacaoPedido: status.HTTP_502_BAD_GATEWAY,
    ErroConsultaCliente: status.HTTP_502_BAD_GATEWAY,
    TransicaoInvalidaError: status.HTTP_409_CONFLICT,
    PagamentoExpiradoError: status.HTTP_410_GONE,
    CheckoutNaoEncontradoError: status.HTTP_404_NOT_FOUND,
    EnderecoMascaradoError: status.HTTP_400_BAD_REQUEST,
    GeocodificacaoError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ProvedorIndisponivelError: status.HTTP_502_BAD_GATEWAY,
}


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler para erros de validação (422) do FastAPI/Pydantic.
    Registra os erros detalhados nos logs.
    """
    error_details = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", []))
        error_details.append({
            "field": field,
            "type": error.get("type", "unknown"),
            "message": error.get("msg", "Erro de validação"),
        })

    logger.error(
        f"[VALIDATION ERROR 422] {request.method} {request.url.path} - "
        f"Erros de validação detectados:\n{json.dumps(error_details, indent=2, ensure_ascii=False)}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": error_details,
            "message": "Erro de validação nos dados fornecidos",
        },
    )


async def http_exception_handler(request: Request, exc):
    """
    Handler para HTTPExceptions.
    Registra erros HTTP nos logs com detalhes.
    """
    status_code = exc.status_code
    log_message = f"[HTTP ERROR {status_code}] {request.method} {request.url.path} - Detalhes: {exc.detail}"
    if status_code >= 500:
        logger.error(log_message)
    elif status_code >= 400:
        logger.warning(log_message)

    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "status_code": status_code},
        headers=getattr(exc, "headers", None),
    )


async def domain_exception_handler(request: Request, exc: Exception):
    """
    Handler para os erros de domínio (checkout e localização).
    O status vem da classe mais específica registrada em STATUS_POR_ERRO.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    for tipo in type(exc).__mro__:
        if tipo in STATUS_POR_ERRO:
            status_code = STATUS_POR_ERRO[tipo]
            break

    if isinstance(exc, PayloadInvalidoError):
        detail = exc.erros
    elif isinstance(exc, ErroCriacaoPedido):
        detail = exc.mensagem
    else:
        detail = str(exc)

    log_message = f"[DOMAIN ERROR {status_code}] {request.method} {request.url.path} - {type(exc).__name__}: {exc}"
    if status_code >= 500:
        logger.error(log_message)
    else:
        logger.warning(log_message)

    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error_type": type(exc).__name__},
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handler para exceções não tratadas.
    Registra erros críticos nos logs.
    """
    logger.error(
        f"[UNHANDLED EXCEPTION] {request.method} {request.url.path} - "
        f"{type(exc).__name__}: {str(exc)}"
    )
    logger.error(f"[UNHANDLED EXCEPTION] Traceback completo:\n{traceback.format_exc()}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Erro interno do servidor",
            "error_type": type(exc).__name__,
        },
    )


DOMAIN_EXCEPTIONS = (CheckoutError, LocalizacaoError)

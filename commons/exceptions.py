# commons/exceptions.py

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger("mdfe.sefaz")


def _codigo_para_excecao(exc) -> str:
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return "UNAUTHORIZED"
    if isinstance(exc, exceptions.PermissionDenied):
        return "FORBIDDEN"
    if isinstance(exc, exceptions.NotFound):
        return "NOT_FOUND"
    if isinstance(exc, (exceptions.ValidationError, exceptions.ParseError)):
        return "VALIDATION_ERROR"
    if isinstance(exc, exceptions.MethodNotAllowed):
        return "METHOD_NOT_ALLOWED"
    if isinstance(exc, exceptions.Throttled):
        return "THROTTLED"
    return "INTERNAL_ERROR"


def envelope_exception_handler(exc, context):
    """
    Renderiza qualquer exceção da API no envelope padrão:

        {"success": false, "message": ..., "error": {"code", "message", "details"}}

    Exceções já tratadas pelo DRF mantêm o status HTTP original.
    Exceções inesperadas viram INTERNAL_ERROR (500), sem derrubar a request.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "api_erro_inesperado",
            extra={
                "event": "api_erro",
                "view": view.__class__.__name__ if view else None,
                "error": str(exc),
            },
        )
        return Response(
            {
                "success": False,
                "message": "Erro interno do servidor",
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "Erro interno do servidor",
                },
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = response.data
    code = _codigo_para_excecao(exc)

    # Detail no formato {"code", "message"} (padrão dos services) é preservado
    if isinstance(detail, dict) and "code" in detail and "message" in detail:
        code = str(detail["code"])
        message = str(detail["message"])
        details = detail.get("details")
    elif isinstance(detail, dict) and "detail" in detail:
        message = str(detail["detail"])
        details = None
    else:
        message = "Dados de entrada inválidos" if code == "VALIDATION_ERROR" else str(detail)
        details = detail

    body = {
        "success": False,
        "message": message,
        "error": {"code": code, "message": message},
    }
    if details is not None:
        body["error"]["details"] = details

    response.data = body
    return response

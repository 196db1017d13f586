# mdfe/resultado.py
"""
Tipo de resultado usado em todo o fluxo MDF-e.

Montagem de payload, gateway SEFAZ, interpretação, auditoria e services
devolvem sempre um `Resultado`:

    Ok(valor)           -> sucesso, com o valor produzido pela etapa
    Falha(ErroMdfe)     -> falha classificada por código

Quem chama faz `if isinstance(res, Falha): ...` em vez de misturar
try/except com dicts {"success": false}.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from rest_framework import status

T = TypeVar("T")


# Códigos de erro do domínio
UNAUTHORIZED = "UNAUTHORIZED"
VALIDATION_ERROR = "VALIDATION_ERROR"
MISSING_REQUIRED_DATA = "MISSING_REQUIRED_DATA"
BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
MDFE_NOT_FOUND = "MDFE_NOT_FOUND"
STATUS_CONFLICT = "STATUS_CONFLICT"
SEFAZ_ERROR = "SEFAZ_ERROR"
SEFAZ_REJECTION = "SEFAZ_REJECTION"
TIMEOUT_ERROR = "TIMEOUT_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"
ERP_ERROR = "ERP_ERROR"
ERP_REJECTION = "ERP_REJECTION"


# Rejeição da SEFAZ volta 200 com success=false: a chamada HTTP deu certo,
# quem recusou foi a regra fiscal.
HTTP_STATUS_POR_CODIGO: Dict[str, int] = {
    UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    MISSING_REQUIRED_DATA: status.HTTP_400_BAD_REQUEST,
    BUSINESS_RULE_VIOLATION: status.HTTP_400_BAD_REQUEST,
    MDFE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    STATUS_CONFLICT: status.HTTP_409_CONFLICT,
    SEFAZ_REJECTION: status.HTTP_200_OK,
    SEFAZ_ERROR: status.HTTP_502_BAD_GATEWAY,
    TIMEOUT_ERROR: status.HTTP_504_GATEWAY_TIMEOUT,
    INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ERP_ERROR: status.HTTP_502_BAD_GATEWAY,
    ERP_REJECTION: status.HTTP_400_BAD_REQUEST,
}


def http_status_para(code: str) -> int:
    return HTTP_STATUS_POR_CODIGO.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)


@dataclass(frozen=True)
class ErroMdfe:
    code: str
    message: str
    details: Optional[Any] = None

    def as_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


@dataclass(frozen=True)
class Ok(Generic[T]):
    valor: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Falha:
    erro: ErroMdfe
    # Dados parciais que ainda interessam ao cliente (ex.: cStat de uma rejeição)
    dados: Optional[Dict[str, Any]] = field(default=None)

    @property
    def ok(self) -> bool:
        return False


Resultado = Union[Ok[T], Falha]


def falha(code: str, message: str, details: Any = None, dados: Optional[Dict[str, Any]] = None) -> Falha:
    return Falha(ErroMdfe(code=code, message=message, details=details), dados=dados)


@dataclass(frozen=True)
class SaidaOperacao:
    """
    Resultado de sucesso de uma operação SEFAZ, já no formato do envelope
    {success, message, data, protocolo?}.
    """

    message: str
    data: Dict[str, Any]
    protocolo: Optional[str] = None

# mdfe/services/documento_service.py
"""
Acesso ao MDF-e sempre amarrado ao tenant do usuário, e atualização de status
condicional (compare-and-swap pelo status esperado).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from mdfe.models import MdfeCertificado, MdfeDocumento
from mdfe.resultado import (
    BUSINESS_RULE_VIOLATION,
    MDFE_NOT_FOUND,
    STATUS_CONFLICT,
    UNAUTHORIZED,
    Ok,
    Resultado,
    falha,
)
from usuario.contexto import ContextoTenant, contexto_do_usuario

logger = logging.getLogger("mdfe.sefaz")


def exigir_tenant(user) -> Resultado[ContextoTenant]:
    contexto = contexto_do_usuario(user)
    if contexto is None:
        return falha(UNAUTHORIZED, "Usuário não autenticado ou sem tenant associado.")
    return Ok(contexto)


def documentos_do_tenant(contexto: ContextoTenant):
    qs = MdfeDocumento.objects.filter(id_tenant=contexto.id_tenant)
    if contexto.id_empresa is not None:
        qs = qs.filter(id_empresa=contexto.id_empresa)
    return qs


def carregar_documento(mdfe_id, contexto: ContextoTenant) -> Resultado[MdfeDocumento]:
    try:
        documento = documentos_do_tenant(contexto).filter(pk=mdfe_id).first()
    except (DjangoValidationError, ValueError):
        documento = None

    if documento is None:
        return falha(MDFE_NOT_FOUND, "MDF-e não encontrado.", details={"mdfeId": str(mdfe_id)})
    return Ok(documento)


def verificar_certificado(contexto: ContextoTenant, agora=None) -> Resultado[MdfeCertificado]:
    """
    O gateway assina com o certificado A1 do tenant/empresa: precisa existir
    e estar dentro da validade.
    """
    certificado = MdfeCertificado.objects.filter(
        id_tenant=contexto.id_tenant,
        id_empresa=contexto.id_empresa,
    ).first()

    if certificado is None:
        return falha(BUSINESS_RULE_VIOLATION, "Certificado digital não cadastrado para a empresa.")
    if not certificado.esta_valido(agora or timezone.now()):
        return falha(
            BUSINESS_RULE_VIOLATION,
            "Certificado digital expirado. Envio bloqueado.",
            details={"validade": certificado.validade.isoformat()},
        )
    return Ok(certificado)


def atualizar_status(
    documento: MdfeDocumento,
    *,
    status_esperado: str,
    novo_status: str,
    campos: Optional[Dict[str, Any]] = None,
) -> Resultado[MdfeDocumento]:
    """
    UPDATE ... WHERE id = ? AND id_tenant = ? AND status = <esperado>.

    Zero linhas afetadas significa que outra request mudou o status no meio
    do caminho: devolve STATUS_CONFLICT e não sobrescreve nada.
    """
    valores: Dict[str, Any] = {"status": novo_status, "updated_at": timezone.now()}
    valores.update(campos or {})

    linhas = MdfeDocumento.objects.filter(
        pk=documento.pk,
        id_tenant=documento.id_tenant,
        status=status_esperado,
    ).update(**valores)

    if linhas == 0:
        logger.warning(
            "mdfe_status_conflito",
            extra={
                "event": "mdfe_status",
                "id_tenant": documento.id_tenant,
                "mdfe_id": str(documento.id),
                "status_esperado": status_esperado,
                "novo_status": novo_status,
            },
        )
        return falha(
            STATUS_CONFLICT,
            "O status do MDF-e foi alterado por outra operação.",
            details={"statusEsperado": status_esperado, "novoStatus": novo_status},
        )

    for campo, valor in valores.items():
        setattr(documento, campo, valor)

    logger.info(
        "mdfe_status_atualizado",
        extra={
            "event": "mdfe_status",
            "id_tenant": documento.id_tenant,
            "mdfe_id": str(documento.id),
            "de": status_esperado,
            "para": novo_status,
        },
    )
    return Ok(documento)

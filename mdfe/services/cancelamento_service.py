# mdfe/services/cancelamento_service.py

import logging
from typing import Optional

from django.utils import timezone

from mdfe.resultado import (
    BUSINESS_RULE_VIOLATION,
    SEFAZ_REJECTION,
    Falha,
    Ok,
    Resultado,
    SaidaOperacao,
    falha,
)
from mdfe.sefaz_clients import SefazGatewayProtocol
from mdfe.services import auditoria_service, documento_service
from mdfe.services.interpretacao_service import interpretar_cancelamento, resumo
from mdfe.services.payload_service import TP_EVENTO_CANCELAMENTO, montar_payload_cancelamento
from mdfe.services.status_service import pode_cancelar
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")


def cancelar_mdfe(
    *,
    contexto: ContextoTenant,
    mdfe_id,
    justificativa: str,
    gateway: SefazGatewayProtocol,
    n_seq_evento: Optional[int] = None,
    agora=None,
) -> Resultado[SaidaOperacao]:
    """
    Cancela um MDF-e autorizado (evento 110111).

    Regras principais:
      - Só documentos autorizados, em até 24h da autorização.
      - Justificativa com 15 a 255 caracteres.
      - Rejeição da SEFAZ não altera o status (pode tentar de novo).
      - Toda resposta do gateway é auditada (evento + retorno).
    """
    agora = agora or timezone.now()
    log_extra = {
        "event": "mdfe_cancelar",
        "id_tenant": contexto.id_tenant,
        "user_id": contexto.user_id,
        "mdfe_id": str(mdfe_id),
    }

    res_doc = documento_service.carregar_documento(mdfe_id, contexto)
    if isinstance(res_doc, Falha):
        return res_doc
    documento = res_doc.valor
    status_anterior = documento.status

    admissivel = pode_cancelar(status_anterior, documento.data_hora_autorizacao, agora)
    if not admissivel.permitido:
        logger.info(
            "mdfe_cancelar_bloqueado",
            extra={**log_extra, "status": status_anterior, "motivo": admissivel.motivo, "outcome": "business_rule"},
        )
        return falha(BUSINESS_RULE_VIOLATION, admissivel.motivo)

    if n_seq_evento is None:
        n_seq_evento = auditoria_service.proximo_n_seq_evento(documento, auditoria_service.TIPO_CANCELAMENTO)

    res_payload = montar_payload_cancelamento(
        documento,
        justificativa=justificativa,
        n_seq_evento=n_seq_evento,
    )
    if isinstance(res_payload, Falha):
        logger.info(
            "mdfe_cancelar_payload_invalido",
            extra={**log_extra, "code": res_payload.erro.code, "outcome": "validation_error"},
        )
        return res_payload
    payload = res_payload.valor

    res_gateway = gateway.cancelar(payload)
    interpretacao = interpretar_cancelamento(res_gateway.valor.corpo) if isinstance(res_gateway, Ok) else None

    falhas_auditoria = auditoria_service.auditar_interacao(
        contexto=contexto,
        documento=documento,
        tipo_evento=auditoria_service.TIPO_CANCELAMENTO,
        tp_evento=TP_EVENTO_CANCELAMENTO,
        n_seq_evento=n_seq_evento,
        payload=payload,
        resultado_gateway=res_gateway,
        interpretacao=interpretacao,
    )
    for f in falhas_auditoria:
        logger.error("mdfe_cancelar_auditoria_falhou", extra={**log_extra, "error": f.erro.message})

    if isinstance(res_gateway, Falha):
        logger.warning(
            "mdfe_cancelar_gateway_falhou",
            extra={**log_extra, "code": res_gateway.erro.code, "outcome": "gateway_error"},
        )
        return res_gateway

    data = {"mdfeId": str(documento.id), "nSeqEvento": n_seq_evento, **resumo(interpretacao)}

    if not interpretacao.aceito:
        logger.info(
            "mdfe_cancelar",
            extra={**log_extra, "c_stat": interpretacao.c_stat, "outcome": "rejected"},
        )
        return falha(
            SEFAZ_REJECTION,
            interpretacao.x_motivo or "Cancelamento rejeitado pela SEFAZ.",
            details={"cStat": interpretacao.c_stat},
            dados={**data, "status": documento.status},
        )

    res_status = documento_service.atualizar_status(
        documento,
        status_esperado=status_anterior,
        novo_status=interpretacao.novo_status,
        campos={"mensagem_sefaz": interpretacao.x_motivo},
    )
    if isinstance(res_status, Falha):
        return res_status

    logger.info(
        "mdfe_cancelar",
        extra={**log_extra, "c_stat": interpretacao.c_stat, "status": documento.status, "outcome": "success"},
    )
    return Ok(
        SaidaOperacao(
            message=interpretacao.x_motivo or "MDF-e cancelado com sucesso",
            data={**data, "status": documento.status},
            protocolo=interpretacao.protocolo,
        )
    )

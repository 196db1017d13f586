# mdfe/services/envio_service.py

import logging
from typing import Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from mdfe.models import MdfeStatus
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
from mdfe.services import auditoria_service, documento_service, numero_service
from mdfe.services.interpretacao_service import interpretar_envio, resumo
from mdfe.services.payload_service import montar_payload_envio
from mdfe.services.status_service import pode_enviar
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")


def _data_autorizacao(data_processamento, agora):
    """
    Data da autorização fiscal (dataProcessamento do gateway), ou `agora`
    quando ausente ou ilegível. Os prazos de 24 h e 30 dias contam daqui.
    """
    if not isinstance(data_processamento, str):
        return agora
    try:
        dt = parse_datetime(data_processamento)
    except ValueError:
        dt = None
    if dt is None:
        return agora
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def enviar_mdfe(
    *,
    contexto: ContextoTenant,
    mdfe_id,
    gateway: SefazGatewayProtocol,
    agora: Optional[object] = None,
) -> Resultado[SaidaOperacao]:
    """
    Envia um MDF-e pendente (ou com erro) para autorização.

    Fluxo:
      1) Carrega o documento do tenant e valida status (pendente/erro).
      2) Exige certificado A1 válido.
      3) Gera ide.nMDF quando ausente.
      4) Monta e valida o payload (sem rede em caso de erro).
      5) Chama o gateway, interpreta o cStat e audita evento + retorno.
      6) Atualiza o status de forma condicional ao status lido no passo 1.
    """
    agora = agora or timezone.now()
    log_extra = {
        "event": "mdfe_enviar",
        "id_tenant": contexto.id_tenant,
        "user_id": contexto.user_id,
        "mdfe_id": str(mdfe_id),
    }

    res_doc = documento_service.carregar_documento(mdfe_id, contexto)
    if isinstance(res_doc, Falha):
        return res_doc
    documento = res_doc.valor
    status_anterior = documento.status

    admissivel = pode_enviar(status_anterior)
    if not admissivel.permitido:
        logger.info("mdfe_enviar_bloqueado", extra={**log_extra, "status": status_anterior, "outcome": "business_rule"})
        return falha(BUSINESS_RULE_VIOLATION, admissivel.motivo)

    res_cert = documento_service.verificar_certificado(contexto, agora)
    if isinstance(res_cert, Falha):
        logger.info("mdfe_enviar_sem_certificado", extra={**log_extra, "outcome": "business_rule"})
        return res_cert

    numero_service.garantir_numero(documento)

    res_payload = montar_payload_envio(documento)
    if isinstance(res_payload, Falha):
        logger.info(
            "mdfe_enviar_payload_invalido",
            extra={**log_extra, "code": res_payload.erro.code, "outcome": "validation_error"},
        )
        return res_payload
    payload = res_payload.valor

    res_gateway = gateway.enviar(payload)
    interpretacao = interpretar_envio(res_gateway.valor.corpo) if isinstance(res_gateway, Ok) else None

    falhas_auditoria = auditoria_service.auditar_interacao(
        contexto=contexto,
        documento=documento,
        tipo_evento=auditoria_service.TIPO_AUTORIZACAO,
        tp_evento="",
        n_seq_evento=auditoria_service.proximo_n_seq_evento(documento, auditoria_service.TIPO_AUTORIZACAO),
        payload=payload,
        resultado_gateway=res_gateway,
        interpretacao=interpretacao,
    )
    for f in falhas_auditoria:
        logger.error("mdfe_enviar_auditoria_falhou", extra={**log_extra, "error": f.erro.message})

    if isinstance(res_gateway, Falha):
        logger.warning(
            "mdfe_enviar_gateway_falhou",
            extra={**log_extra, "code": res_gateway.erro.code, "outcome": "gateway_error"},
        )
        return res_gateway

    campos = {"mensagem_sefaz": interpretacao.x_motivo}
    if interpretacao.aceito:
        campos.update(
            {
                "protocolo": interpretacao.protocolo,
                "chave": interpretacao.chave,
                "data_hora_autorizacao": _data_autorizacao(interpretacao.data_processamento, agora),
            }
        )

    res_status = documento_service.atualizar_status(
        documento,
        status_esperado=status_anterior,
        novo_status=interpretacao.novo_status,
        campos=campos,
    )
    if isinstance(res_status, Falha):
        return res_status

    data = {"mdfeId": str(documento.id), "status": documento.status, **resumo(interpretacao)}

    if not interpretacao.aceito:
        logger.info(
            "mdfe_enviar",
            extra={**log_extra, "c_stat": interpretacao.c_stat, "status": documento.status, "outcome": "rejected"},
        )
        return falha(
            SEFAZ_REJECTION,
            interpretacao.x_motivo or "MDF-e rejeitado pela SEFAZ.",
            details={"cStat": interpretacao.c_stat},
            dados=data,
        )

    logger.info(
        "mdfe_enviar",
        extra={**log_extra, "c_stat": interpretacao.c_stat, "status": documento.status, "outcome": "success"},
    )
    return Ok(
        SaidaOperacao(
            message=interpretacao.x_motivo or "MDF-e autorizado com sucesso",
            data=data,
            protocolo=interpretacao.protocolo,
        )
    )

# mdfe/services/encerramento_service.py

import logging
from typing import Optional

from django.utils import timezone

from enderecos.services.municipio_service import MunicipioLookupProtocol, MunicipioOrmLookup
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
from mdfe.services.interpretacao_service import interpretar_encerramento, resumo
from mdfe.services.payload_service import (
    TP_EVENTO_ENCERRAMENTO,
    DadosEncerramento,
    montar_payload_encerramento,
)
from mdfe.services.status_service import pode_encerrar
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")


def encerrar_mdfe(
    *,
    contexto: ContextoTenant,
    mdfe_id,
    dados: DadosEncerramento,
    gateway: SefazGatewayProtocol,
    lookup: Optional[MunicipioLookupProtocol] = None,
    n_seq_evento: Optional[int] = None,
    agora=None,
) -> Resultado[SaidaOperacao]:
    """
    Encerra um MDF-e autorizado (evento 110112).

    Regras principais:
      - Só documentos autorizados, com protocolo e chave, em até 30 dias.
      - Município de encerramento resolvido por UF + nome (código IBGE);
        não encontrado -> MISSING_REQUIRED_DATA, sem chamada ao gateway.
      - Aceito com cStat 135 ou 631; qualquer outro mantém o status.
    """
    agora = agora or timezone.now()
    lookup = lookup or MunicipioOrmLookup()
    log_extra = {
        "event": "mdfe_encerrar",
        "id_tenant": contexto.id_tenant,
        "user_id": contexto.user_id,
        "mdfe_id": str(mdfe_id),
    }

    res_doc = documento_service.carregar_documento(mdfe_id, contexto)
    if isinstance(res_doc, Falha):
        return res_doc
    documento = res_doc.valor
    status_anterior = documento.status

    admissivel = pode_encerrar(
        status_anterior,
        documento.data_hora_autorizacao,
        agora,
        protocolo=documento.protocolo,
        chave=documento.chave,
        exigir_identificacao=True,
    )
    if not admissivel.permitido:
        logger.info(
            "mdfe_encerrar_bloqueado",
            extra={**log_extra, "status": status_anterior, "motivo": admissivel.motivo, "outcome": "business_rule"},
        )
        return falha(BUSINESS_RULE_VIOLATION, admissivel.motivo)

    if n_seq_evento is None:
        n_seq_evento = auditoria_service.proximo_n_seq_evento(documento, auditoria_service.TIPO_ENCERRAMENTO)

    res_payload = montar_payload_encerramento(
        documento,
        dados,
        lookup=lookup,
        n_seq_evento=n_seq_evento,
    )
    if isinstance(res_payload, Falha):
        logger.info(
            "mdfe_encerrar_payload_invalido",
            extra={**log_extra, "code": res_payload.erro.code, "outcome": "validation_error"},
        )
        return res_payload
    payload = res_payload.valor

    res_gateway = gateway.encerrar(payload)
    interpretacao = interpretar_encerramento(res_gateway.valor.corpo) if isinstance(res_gateway, Ok) else None

    falhas_auditoria = auditoria_service.auditar_interacao(
        contexto=contexto,
        documento=documento,
        tipo_evento=auditoria_service.TIPO_ENCERRAMENTO,
        tp_evento=TP_EVENTO_ENCERRAMENTO,
        n_seq_evento=n_seq_evento,
        payload=payload,
        resultado_gateway=res_gateway,
        interpretacao=interpretacao,
    )
    for f in falhas_auditoria:
        logger.error("mdfe_encerrar_auditoria_falhou", extra={**log_extra, "error": f.erro.message})

    if isinstance(res_gateway, Falha):
        logger.warning(
            "mdfe_encerrar_gateway_falhou",
            extra={**log_extra, "code": res_gateway.erro.code, "outcome": "gateway_error"},
        )
        return res_gateway

    evento = payload["evento"]
    data = {
        "mdfeId": str(documento.id),
        "nSeqEvento": n_seq_evento,
        "cUFEncerramento": evento["cUFEncerramento"],
        "cMunEncerramento": evento["cMunEncerramento"],
        "dtEncerramento": evento["dtEncerramento"],
        **resumo(interpretacao),
    }

    if not interpretacao.aceito:
        logger.info(
            "mdfe_encerrar",
            extra={**log_extra, "c_stat": interpretacao.c_stat, "outcome": "rejected"},
        )
        return falha(
            SEFAZ_REJECTION,
            interpretacao.x_motivo or "Encerramento rejeitado pela SEFAZ.",
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
        "mdfe_encerrar",
        extra={**log_extra, "c_stat": interpretacao.c_stat, "status": documento.status, "outcome": "success"},
    )
    return Ok(
        SaidaOperacao(
            message=interpretacao.x_motivo or "MDF-e encerrado com sucesso",
            data={**data, "status": documento.status},
            protocolo=interpretacao.protocolo,
        )
    )

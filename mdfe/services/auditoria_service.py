# mdfe/services/auditoria_service.py
"""
Trilha de auditoria dos eventos MDF-e.

Duas tabelas:
  - MdfeEvento: um registro por tentativa de evento que o gateway chegou a
    processar (aceito ou não). Append-only.
  - MdfeRetorno: captura bruta de toda troca HTTP concluída com o gateway,
    inclusive respostas não-2xx.

Timeout e falha de conexão não geram nenhum dos dois (não houve resposta).

Falha ao gravar auditoria é logada e devolvida como Falha(INTERNAL_ERROR);
quem orquestra decide o que fazer, mas nunca sobrepõe o resultado do gateway.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from mdfe.models import MdfeArquivo, MdfeDocumento, MdfeEvento, MdfeRetorno
from mdfe.resultado import INTERNAL_ERROR, MDFE_NOT_FOUND, Falha, Ok, Resultado, falha
from mdfe.services.interpretacao_service import Interpretacao
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")

TIPO_AUTORIZACAO = "autorizacao"
TIPO_CANCELAMENTO = "cancelamento"
TIPO_ENCERRAMENTO = "encerramento"


def proximo_n_seq_evento(documento: MdfeDocumento, tipo_evento: str) -> int:
    """
    nSeqEvento = quantidade de eventos já registrados desse tipo para o
    documento + 1.
    """
    existentes = MdfeEvento.objects.filter(documento=documento, tipo_evento=tipo_evento).count()
    return existentes + 1


def _mesmo_tenant(contexto: ContextoTenant, documento: MdfeDocumento) -> bool:
    return documento.id_tenant == contexto.id_tenant


def registrar_evento(
    *,
    contexto: ContextoTenant,
    documento: MdfeDocumento,
    tipo_evento: str,
    tp_evento: str,
    n_seq_evento: int,
    interpretacao: Interpretacao,
) -> Resultado[MdfeEvento]:
    if not _mesmo_tenant(contexto, documento):
        return falha(MDFE_NOT_FOUND, "Documento não pertence ao tenant do usuário.")

    try:
        with transaction.atomic():
            evento = MdfeEvento.objects.create(
                documento=documento,
                id_tenant=contexto.id_tenant,
                id_empresa=contexto.id_empresa,
                user_id=contexto.user_id,
                chave=interpretacao.chave or documento.chave,
                tp_evento=tp_evento,
                tipo_evento=tipo_evento,
                n_seq_evento=n_seq_evento,
                protocolo=interpretacao.protocolo,
                c_stat=interpretacao.c_stat,
                x_motivo=interpretacao.x_motivo,
                dh_evento=timezone.now(),
                aceito=interpretacao.aceito,
                xml=interpretacao.xml,
                pdf_base64=interpretacao.pdf_base64,
            )
    except DatabaseError as exc:
        logger.exception(
            "mdfe_evento_erro_gravacao",
            extra={
                "event": "mdfe_auditoria",
                "mdfe_id": str(documento.id),
                "tipo_evento": tipo_evento,
                "error": str(exc),
            },
        )
        return falha(INTERNAL_ERROR, "Erro ao registrar evento do MDF-e.", details={"error": str(exc)})

    logger.info(
        "mdfe_evento_registrado",
        extra={
            "event": "mdfe_auditoria",
            "id_tenant": contexto.id_tenant,
            "mdfe_id": str(documento.id),
            "tipo_evento": tipo_evento,
            "n_seq_evento": n_seq_evento,
            "c_stat": interpretacao.c_stat,
            "aceito": interpretacao.aceito,
        },
    )
    return Ok(evento)


def _salvar_arquivos(
    *,
    contexto: ContextoTenant,
    documento: MdfeDocumento,
    chave: Optional[str],
    xml: Optional[str],
    pdf_base64: Optional[str],
) -> None:
    if not chave or not (xml or pdf_base64):
        return

    defaults: Dict[str, Any] = {"documento": documento, "id_empresa": contexto.id_empresa}
    if xml:
        defaults["xml"] = xml
    if pdf_base64:
        defaults["pdf_base64"] = pdf_base64

    MdfeArquivo.objects.update_or_create(
        id_tenant=contexto.id_tenant,
        chave=chave,
        defaults=defaults,
    )


def registrar_retorno(
    *,
    contexto: ContextoTenant,
    documento: MdfeDocumento,
    tipo_operacao: str,
    http_status: Optional[int],
    payload_enviado: Optional[Dict[str, Any]],
    resposta: Any,
    interpretacao: Optional[Interpretacao] = None,
) -> Resultado[MdfeRetorno]:
    if not _mesmo_tenant(contexto, documento):
        return falha(MDFE_NOT_FOUND, "Documento não pertence ao tenant do usuário.")

    if resposta is not None and not isinstance(resposta, (dict, list)):
        resposta = {"raw": str(resposta)}

    chave = (interpretacao.chave if interpretacao else None) or documento.chave

    try:
        with transaction.atomic():
            retorno = MdfeRetorno.objects.create(
                documento=documento,
                id_tenant=contexto.id_tenant,
                id_empresa=contexto.id_empresa,
                user_id=contexto.user_id,
                tipo_operacao=tipo_operacao,
                http_status=http_status,
                payload_enviado=payload_enviado,
                resposta=resposta,
                c_stat=interpretacao.c_stat if interpretacao else None,
                x_motivo=interpretacao.x_motivo if interpretacao else None,
                protocolo=interpretacao.protocolo if interpretacao else None,
                chave=chave,
                data_processamento=interpretacao.data_processamento if interpretacao else None,
            )
            if interpretacao is not None:
                _salvar_arquivos(
                    contexto=contexto,
                    documento=documento,
                    chave=chave,
                    xml=interpretacao.xml,
                    pdf_base64=interpretacao.pdf_base64,
                )
    except DatabaseError as exc:
        logger.exception(
            "mdfe_retorno_erro_gravacao",
            extra={
                "event": "mdfe_auditoria",
                "mdfe_id": str(documento.id),
                "tipo_operacao": tipo_operacao,
                "error": str(exc),
            },
        )
        return falha(INTERNAL_ERROR, "Erro ao registrar retorno da SEFAZ.", details={"error": str(exc)})

    return Ok(retorno)


def auditar_interacao(
    *,
    contexto: ContextoTenant,
    documento: MdfeDocumento,
    tipo_evento: str,
    tp_evento: str,
    n_seq_evento: int,
    payload: Dict[str, Any],
    resultado_gateway,
    interpretacao: Optional[Interpretacao],
) -> List[Falha]:
    """
    Aplica as regras de quando auditar uma chamada ao gateway:

      - resposta 2xx: retorno sempre; evento quando a resposta trouxe `data`
      - resposta não-2xx: só retorno
      - timeout / conexão: nada

    Devolve as falhas de gravação (lista vazia quando tudo foi gravado).
    """
    falhas: List[Falha] = []

    if isinstance(resultado_gateway, Ok):
        resposta = resultado_gateway.valor
        res = registrar_retorno(
            contexto=contexto,
            documento=documento,
            tipo_operacao=tipo_evento,
            http_status=resposta.http_status,
            payload_enviado=payload,
            resposta=resposta.corpo,
            interpretacao=interpretacao,
        )
        if isinstance(res, Falha):
            falhas.append(res)

        if interpretacao is not None and interpretacao.dados is not None:
            res = registrar_evento(
                contexto=contexto,
                documento=documento,
                tipo_evento=tipo_evento,
                tp_evento=tp_evento,
                n_seq_evento=n_seq_evento,
                interpretacao=interpretacao,
            )
            if isinstance(res, Falha):
                falhas.append(res)
        return falhas

    dados = getattr(resultado_gateway, "dados", None) or {}
    if "http_status" in dados:
        res = registrar_retorno(
            contexto=contexto,
            documento=documento,
            tipo_operacao=tipo_evento,
            http_status=dados.get("http_status"),
            payload_enviado=payload,
            resposta=dados.get("corpo"),
        )
        if isinstance(res, Falha):
            falhas.append(res)

    return falhas

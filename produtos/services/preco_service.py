# produtos/services/preco_service.py
"""
Atualização de preços no ERP e histórico local das alterações.

Fluxo de atualizar_precos:
  1. monta {"precos": [{"id", "preco": "0.00"}]} e envia ao ERP;
  2. status geral != "OK": Falha(ERP_REJECTION) com os erros do ERP,
     nenhum log gravado;
  3. status "OK": grava ProdutoPrecoLog dos itens que o ERP não recusou
     individualmente e devolve o resumo por registro.

Falha ao gravar o log não muda o resultado: o preço já foi alterado no ERP.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List

from django.db import DatabaseError, transaction

from mdfe.resultado import ERP_REJECTION, Falha, Ok, Resultado, falha
from produtos.erp_clients import ErpGatewayProtocol
from produtos.models import ProdutoPrecoLog
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")

STATUS_OK = "OK"
CENTAVOS = Decimal("0.01")


def _preco_texto(preco: Decimal) -> str:
    return str(Decimal(preco).quantize(CENTAVOS))


def _mensagem_erros(erros: List[Any]) -> str:
    textos = [e.get("erro") for e in erros if isinstance(e, dict) and e.get("erro")]
    return ", ".join(textos) or "Erro no processamento da API do ERP."


def _gravar_logs(contexto: ContextoTenant, itens: List[Dict[str, Any]]) -> None:
    if not itens:
        return
    try:
        with transaction.atomic():
            ProdutoPrecoLog.objects.bulk_create(
                [
                    ProdutoPrecoLog(
                        id_tenant=contexto.id_tenant,
                        id_empresa=contexto.id_empresa,
                        produto_id=item["id"],
                        preco=Decimal(item["preco"]).quantize(CENTAVOS),
                        usuario_alteracao=contexto.user_id,
                        nome_usuario=contexto.username,
                    )
                    for item in itens
                ]
            )
    except DatabaseError as exc:
        logger.exception(
            "produto_preco_log_falhou",
            extra={"event": "produto_preco", "id_tenant": contexto.id_tenant, "error": str(exc)},
        )


def atualizar_precos(
    *,
    contexto: ContextoTenant,
    itens: List[Dict[str, Any]],
    gateway: ErpGatewayProtocol,
) -> Resultado[Dict[str, Any]]:
    precos = [{"id": str(item["id"]), "preco": _preco_texto(item["preco"])} for item in itens]
    log_extra = {"event": "produto_preco", "id_tenant": contexto.id_tenant, "user_id": contexto.user_id}

    res = gateway.atualizar_precos({"precos": precos})
    if isinstance(res, Falha):
        logger.warning("produto_preco_erp_falhou", extra={**log_extra, "code": res.erro.code})
        return res

    resposta = res.valor
    retorno = resposta.retorno

    if retorno.get("status") != STATUS_OK:
        erros_gerais = retorno.get("erros") or []
        logger.warning("produto_preco_rejeitado", extra={**log_extra, "status": retorno.get("status")})
        return falha(
            ERP_REJECTION,
            _mensagem_erros(erros_gerais),
            details={
                "status_processamento": retorno.get("status_processamento"),
                "status": retorno.get("status"),
                "erros": erros_gerais,
            },
        )

    registros = resposta.registros
    sucessos = [r for r in registros if r.get("status") == STATUS_OK]
    erros = [r for r in registros if r.get("status") != STATUS_OK]

    recusados = {str(r.get("id")) for r in erros}
    _gravar_logs(contexto, [p for p in precos if p["id"] not in recusados])

    logger.info(
        "produto_preco_atualizado",
        extra={**log_extra, "enviados": len(precos), "sucessos": len(sucessos), "erros": len(erros)},
    )

    return Ok(
        {
            "resumo": {
                "total_enviados": len(precos),
                "total_processados": len(registros),
                "sucessos": len(sucessos),
                "erros": len(erros),
                "status_processamento": retorno.get("status_processamento"),
                "status_geral": retorno.get("status"),
            },
            "detalhes": {
                "registros_processados": registros,
                "sucessos": sucessos,
                "erros_individuais": erros,
            },
        }
    )


def historico_precos(contexto: ContextoTenant, produto_id: str):
    return ProdutoPrecoLog.objects.filter(id_tenant=contexto.id_tenant, produto_id=produto_id)

# mdfe/services/interpretacao_service.py
"""
Interpretação das respostas do gateway SEFAZ.

Funções puras sobre o corpo da resposta: decidem se o evento foi aceito e
qual o novo status do documento. Nada aqui grava no banco.

Tabela de cStat -> status (envio):
  100                  autorizado
  101                  cancelado
  132                  encerrado
  103, 104, 105        pendente (lote recebido / em processamento)
  110, 301, 302, 303   denegado
  demais 200..999      rejeitado
  qualquer outro       erro
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from mdfe.models.mdfe_models import MdfeStatus

CSTAT_AUTORIZADO = 100
CSTATS_EVENTO_AUTORIZADO = frozenset({100, 101, 135, 136})
CSTATS_ENCERRAMENTO_ACEITO = frozenset({135, 631})
CSTATS_PENDENTE = frozenset({103, 104, 105})
CSTATS_DENEGADO = frozenset({110, 301, 302, 303})


@dataclass(frozen=True)
class Interpretacao:
    aceito: bool
    novo_status: Optional[str]
    c_stat: Optional[int]
    x_motivo: Optional[str]
    protocolo: Optional[str] = None
    chave: Optional[str] = None
    data_processamento: Optional[str] = None
    xml: Optional[str] = None
    pdf_base64: Optional[str] = None
    dados: Optional[Dict[str, Any]] = None


def _como_int(valor: Any) -> Optional[int]:
    if isinstance(valor, bool) or valor is None:
        return None
    try:
        return int(valor)
    except (TypeError, ValueError):
        return None


def mapear_cstat_para_status(cstat: Any) -> MdfeStatus:
    """
    Total: todo valor de entrada cai em exatamente um dos sete status.
    """
    codigo = _como_int(cstat)
    if codigo is None:
        return MdfeStatus.ERRO
    if codigo == CSTAT_AUTORIZADO:
        return MdfeStatus.AUTORIZADO
    if codigo == 101:
        return MdfeStatus.CANCELADO
    if codigo == 132:
        return MdfeStatus.ENCERRADO
    if codigo in CSTATS_PENDENTE:
        return MdfeStatus.PENDENTE
    if codigo in CSTATS_DENEGADO:
        return MdfeStatus.DENEGADO
    if 200 <= codigo <= 999:
        return MdfeStatus.REJEITADO
    return MdfeStatus.ERRO


def extrair_dados(corpo: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(corpo, dict):
        return None
    data = corpo.get("data")
    return data if isinstance(data, dict) else None


def _cstat(corpo: Any) -> Optional[int]:
    dados = extrair_dados(corpo)
    return _como_int(dados.get("cStat")) if dados else None


def is_evento_autorizado(corpo: Any) -> bool:
    return _cstat(corpo) in CSTATS_EVENTO_AUTORIZADO


def is_encerramento_aceito(corpo: Any) -> bool:
    return _cstat(corpo) in CSTATS_ENCERRAMENTO_ACEITO


def _campos(corpo: Any) -> Dict[str, Any]:
    """
    Normaliza os campos da resposta. O gateway devolve protocolo/chave com
    nomes diferentes conforme a operação (protocolo|nProt, chave|chMDFe).
    """
    dados = extrair_dados(corpo)
    mensagem = corpo.get("message") if isinstance(corpo, dict) else None

    if dados is None:
        return {
            "c_stat": None,
            "x_motivo": mensagem or "Resposta da SEFAZ sem dados do processamento.",
            "dados": None,
        }

    return {
        "c_stat": _como_int(dados.get("cStat")),
        "x_motivo": dados.get("xMotivo") or mensagem,
        "protocolo": dados.get("protocolo") or dados.get("nProt") or None,
        "chave": dados.get("chave") or dados.get("chMDFe") or None,
        "data_processamento": dados.get("dataProcessamento") or dados.get("dhRegEvento"),
        "xml": dados.get("xml"),
        "pdf_base64": dados.get("pdfBase64"),
        "dados": dados,
    }


def interpretar_envio(corpo: Any) -> Interpretacao:
    """
    Envio sempre produz um novo status: cStat 100 autoriza, os demais
    seguem a tabela (sem cStat o documento vai para erro).
    """
    campos = _campos(corpo)
    novo_status = mapear_cstat_para_status(campos["c_stat"])
    return Interpretacao(
        aceito=novo_status == MdfeStatus.AUTORIZADO,
        novo_status=novo_status,
        **campos,
    )


def interpretar_cancelamento(corpo: Any) -> Interpretacao:
    campos = _campos(corpo)
    aceito = is_evento_autorizado(corpo)
    return Interpretacao(
        aceito=aceito,
        novo_status=MdfeStatus.CANCELADO if aceito else None,
        **campos,
    )


def interpretar_encerramento(corpo: Any) -> Interpretacao:
    campos = _campos(corpo)
    aceito = is_encerramento_aceito(corpo)
    return Interpretacao(
        aceito=aceito,
        novo_status=MdfeStatus.ENCERRADO if aceito else None,
        **campos,
    )


def resumo(interpretacao: Interpretacao) -> Dict[str, Any]:
    """
    Campos devolvidos ao cliente no `data` do envelope.
    """
    return {
        "cStat": interpretacao.c_stat,
        "xMotivo": interpretacao.x_motivo,
        "protocolo": interpretacao.protocolo,
        "chave": interpretacao.chave,
        "dataProcessamento": interpretacao.data_processamento,
    }

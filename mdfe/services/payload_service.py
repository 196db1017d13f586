# mdfe/services/payload_service.py
"""
Montagem dos corpos de requisição enviados ao gateway SEFAZ.

Três formatos:
  - envio:         documento completo (ide, emit, infModal, infDoc, tot, infAdic)
  - cancelamento:  campos base do documento + justificativa + nSeqEvento
  - encerramento:  {"mdfe": <documento>, "evento": {...110112...}}

Nenhuma função daqui faz chamada de rede. Falta de dado obrigatório no
documento vira MISSING_REQUIRED_DATA; valor malformado vira VALIDATION_ERROR.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.utils import timezone
from rest_framework.exceptions import ErrorDetail

from enderecos.services.municipio_service import MunicipioLookupProtocol, codigo_uf
from mdfe.models import MdfeDocumento
from mdfe.resultado import (
    MISSING_REQUIRED_DATA,
    VALIDATION_ERROR,
    Ok,
    Resultado,
    falha,
)
from mdfe.serializers_documento import DocumentoFiscalSerializer

logger = logging.getLogger("mdfe.sefaz")

TP_EVENTO_CANCELAMENTO = "110111"
TP_EVENTO_ENCERRAMENTO = "110112"

JUSTIFICATIVA_MIN = 15
JUSTIFICATIVA_MAX = 255
N_SEQ_EVENTO_MAX = 20


@dataclass(frozen=True)
class DadosEncerramento:
    uf: str
    municipio: str
    codigo_municipio: Optional[str] = None
    data_encerramento: Optional[str] = None


def _somente_required(erros: Any) -> bool:
    """
    True quando todos os erros do serializer são de campo ausente.
    """
    if isinstance(erros, dict):
        return all(_somente_required(v) for v in erros.values())
    if isinstance(erros, list):
        return all(_somente_required(v) for v in erros)
    if isinstance(erros, ErrorDetail):
        return erros.code in ("required", "null", "blank", "empty")
    return False


def _documento_camel_case(documento: MdfeDocumento) -> Dict[str, Any]:
    doc = {
        "id": str(documento.id),
        "id_tenant": documento.id_tenant,
        "id_empresa": documento.id_empresa,
        "ide": dict(documento.ide or {}),
        "emit": dict(documento.emit or {}),
        "infModal": dict(documento.inf_modal or {}),
        "infDoc": dict(documento.inf_doc or {}),
        "tot": dict(documento.tot or {}),
    }
    if documento.inf_adic:
        doc["infAdic"] = dict(documento.inf_adic)
    return doc


def validar_documento(documento: MdfeDocumento) -> Resultado[Dict[str, Any]]:
    """
    Valida as seções fiscais do documento e devolve o dict camelCase
    pronto para o gateway.
    """
    doc = _documento_camel_case(documento)

    cnpj = str(doc["emit"].get("CNPJ") or "").strip()
    if not cnpj:
        return falha(
            MISSING_REQUIRED_DATA,
            "CNPJ do emitente não informado no MDF-e.",
            details={"emit": {"CNPJ": ["Campo obrigatório."]}},
        )
    # JSON livre no CRUD: o CNPJ pode ter sido gravado como número
    doc["emit"]["CNPJ"] = cnpj

    serializer = DocumentoFiscalSerializer(data=doc)
    if serializer.is_valid():
        return Ok(doc)

    erros = serializer.errors
    if _somente_required(erros):
        return falha(MISSING_REQUIRED_DATA, "MDF-e com dados obrigatórios ausentes.", details=erros)
    return falha(VALIDATION_ERROR, "MDF-e com dados inválidos.", details=erros)


def montar_payload_envio(documento: MdfeDocumento) -> Resultado[Dict[str, Any]]:
    return validar_documento(documento)


def _validar_n_seq_evento(n_seq_evento: int) -> Optional[str]:
    if not isinstance(n_seq_evento, int) or isinstance(n_seq_evento, bool):
        return "nSeqEvento deve ser um número inteiro."
    if n_seq_evento < 1 or n_seq_evento > N_SEQ_EVENTO_MAX:
        return f"nSeqEvento deve estar entre 1 e {N_SEQ_EVENTO_MAX}."
    return None


def montar_payload_cancelamento(
    documento: MdfeDocumento,
    *,
    justificativa: str,
    n_seq_evento: int = 1,
) -> Resultado[Dict[str, Any]]:
    texto = (justificativa or "").strip()
    if not texto:
        return falha(VALIDATION_ERROR, "Justificativa é obrigatória.")
    if len(texto) < JUSTIFICATIVA_MIN or len(texto) > JUSTIFICATIVA_MAX:
        return falha(
            VALIDATION_ERROR,
            f"Justificativa deve ter entre {JUSTIFICATIVA_MIN} e {JUSTIFICATIVA_MAX} caracteres.",
            details={"justificativa": len(texto)},
        )

    erro_seq = _validar_n_seq_evento(n_seq_evento)
    if erro_seq:
        return falha(VALIDATION_ERROR, erro_seq)

    faltando = []
    if not documento.chave:
        faltando.append("chave")
    if not documento.protocolo:
        faltando.append("protocolo")
    if not documento.cnpj_emitente:
        faltando.append("emit.CNPJ")
    if not documento.uf_codigo:
        faltando.append("ide.cUF")
    if faltando:
        return falha(
            MISSING_REQUIRED_DATA,
            "MDF-e sem dados obrigatórios para cancelamento.",
            details={"campos": faltando},
        )

    return Ok(
        {
            "cnpjcpf": documento.cnpj_emitente,
            "chaveMdfe": documento.chave,
            "nProt": documento.protocolo,
            "cUF": documento.uf_codigo,
            "id_tenant": documento.id_tenant,
            "id_empresa": documento.id_empresa,
            "tpEvento": TP_EVENTO_CANCELAMENTO,
            "nSeqEvento": n_seq_evento,
            "justificativa": texto,
        }
    )


def montar_payload_encerramento(
    documento: MdfeDocumento,
    dados: DadosEncerramento,
    *,
    lookup: MunicipioLookupProtocol,
    n_seq_evento: int = 1,
) -> Resultado[Dict[str, Any]]:
    """
    O município de encerramento vem em texto livre (UF + nome) e é resolvido
    para o código IBGE pelo `lookup`. Um codigoMunicipio informado pelo
    cliente precisa bater com o resolvido.
    """
    erro_seq = _validar_n_seq_evento(n_seq_evento)
    if erro_seq:
        return falha(VALIDATION_ERROR, erro_seq)

    if not documento.chave or not documento.protocolo:
        return falha(
            MISSING_REQUIRED_DATA,
            "MDF-e sem chave de acesso ou protocolo de autorização.",
        )

    c_uf = codigo_uf(dados.uf)
    if c_uf is None:
        return falha(VALIDATION_ERROR, f"UF de encerramento inválida: '{dados.uf}'.")

    municipio = lookup.resolver(dados.uf, dados.municipio)
    if municipio is None:
        return falha(
            MISSING_REQUIRED_DATA,
            "Município de encerramento não encontrado.",
            details={"uf": dados.uf, "municipio": dados.municipio},
        )

    if dados.codigo_municipio and str(dados.codigo_municipio) != str(municipio.codigo_ibge):
        logger.warning(
            "mdfe_encerramento_municipio_divergente",
            extra={
                "event": "mdfe_encerrar",
                "mdfe_id": str(documento.id),
                "codigo_informado": dados.codigo_municipio,
                "codigo_resolvido": municipio.codigo_ibge,
            },
        )
        return falha(
            VALIDATION_ERROR,
            "Código do município não corresponde ao município informado.",
            details={
                "codigoMunicipio": dados.codigo_municipio,
                "codigoResolvido": municipio.codigo_ibge,
            },
        )

    dt_encerramento = dados.data_encerramento or timezone.localtime().isoformat()

    return Ok(
        {
            "mdfe": _documento_camel_case(documento),
            "evento": {
                "chave": documento.chave,
                "tpEvento": TP_EVENTO_ENCERRAMENTO,
                "nSeqEvento": n_seq_evento,
                "nProt": documento.protocolo,
                "cUFEncerramento": c_uf,
                "cMunEncerramento": str(municipio.codigo_ibge),
                "dtEncerramento": dt_encerramento,
            },
        }
    )

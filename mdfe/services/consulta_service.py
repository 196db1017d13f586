# mdfe/services/consulta_service.py
"""
Consultas ao gateway que não alteram documentos:
  - status do serviço SEFAZ por UF/ambiente
  - MDF-e não encerrados de um CNPJ
"""

import logging

from mdfe.models import MdfeCertificado
from mdfe.resultado import SEFAZ_ERROR, Falha, Ok, Resultado, SaidaOperacao, falha
from mdfe.sefaz_clients import SefazGatewayProtocol
from mdfe.services.interpretacao_service import extrair_dados
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")

VERSAO_LAYOUT = "3.00"
AMBIENTES = {"1": "Produção", "2": "Homologação"}


def _cnpj_do_certificado(contexto: ContextoTenant) -> str:
    cert = (
        MdfeCertificado.objects.filter(id_tenant=contexto.id_tenant, id_empresa=contexto.id_empresa)
        .only("cpfcnpj")
        .first()
    )
    return cert.cpfcnpj if cert else ""


def consultar_status_sefaz(
    *,
    contexto: ContextoTenant,
    c_uf: int,
    ambiente: str,
    gateway: SefazGatewayProtocol,
) -> Resultado[SaidaOperacao]:
    payload = {
        "cnpjcpf": _cnpj_do_certificado(contexto),
        "tpAmb": ambiente,
        "cUF": c_uf,
        "versao": VERSAO_LAYOUT,
    }

    res = gateway.consultar_status(payload)
    if isinstance(res, Falha):
        logger.warning(
            "sefaz_status_falhou",
            extra={"event": "sefaz_status", "id_tenant": contexto.id_tenant, "code": res.erro.code},
        )
        return res

    dados = extrair_dados(res.valor.corpo)
    if dados is None or "cStat" not in dados:
        return falha(SEFAZ_ERROR, "Resposta inválida da SEFAZ.", details={"resposta": res.valor.corpo})

    logger.info(
        "sefaz_status",
        extra={
            "event": "sefaz_status",
            "id_tenant": contexto.id_tenant,
            "c_uf": c_uf,
            "ambiente": ambiente,
            "c_stat": dados.get("cStat"),
        },
    )
    return Ok(
        SaidaOperacao(
            message=f"Status da SEFAZ obtido com sucesso ({AMBIENTES.get(ambiente, ambiente)})",
            data=dados,
        )
    )


def consultar_nao_encerrados(
    *,
    contexto: ContextoTenant,
    cnpj: str,
    gateway: SefazGatewayProtocol,
) -> Resultado[SaidaOperacao]:
    res = gateway.consultar_nao_encerrados({"cnpjcpf": cnpj})
    if isinstance(res, Falha):
        logger.warning(
            "mdfe_nao_encerrados_falhou",
            extra={"event": "mdfe_nao_encerrados", "id_tenant": contexto.id_tenant, "code": res.erro.code},
        )
        return res

    dados = extrair_dados(res.valor.corpo) or {}
    itens = dados.get("items") or []

    logger.info(
        "mdfe_nao_encerrados",
        extra={"event": "mdfe_nao_encerrados", "id_tenant": contexto.id_tenant, "quantidade": len(itens)},
    )
    return Ok(SaidaOperacao(message="Consulta realizada com sucesso", data={"items": itens}))

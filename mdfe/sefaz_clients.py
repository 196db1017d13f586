"""
Camada de client do gateway SEFAZ (API MDF-e).

Este módulo define:

- Contrato (Protocol) que as services de envio/cancelamento/encerramento usam.
- HttpSefazGateway: client real, sobre `requests`, com bearer token e timeout.
- MockSefazGateway: respostas coerentes para desenvolvimento sem API externa.

Nenhuma operação levanta exceção: o resultado é sempre um `Resultado`,
Ok(RespostaGateway) para HTTP 2xx com JSON válido, ou Falha com um dos
códigos SEFAZ_ERROR / TIMEOUT_ERROR / INTERNAL_ERROR.

Quando o gateway respondeu (mesmo com HTTP de erro), a Falha carrega em
`dados` o http_status e o corpo, para que o retorno seja auditado.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests
from django.utils import timezone

from mdfe.resultado import (
    INTERNAL_ERROR,
    SEFAZ_ERROR,
    TIMEOUT_ERROR,
    Ok,
    Resultado,
    falha,
)

logger = logging.getLogger("mdfe.sefaz")

ENDPOINT_ENVIO = ""
ENDPOINT_CANCELAMENTO = "evento/cancelamento"
ENDPOINT_ENCERRAMENTO = "evento/encerramento"
ENDPOINT_STATUS = "status"
ENDPOINT_NAO_ENCERRADOS = "consulta/nao-encerrados"

TIMEOUT_PADRAO = 30.0


# ---------------------------------------------------------------------------
# DTO de resposta
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RespostaGateway:
    """
    Resposta HTTP 2xx do gateway, já decodificada.

    `corpo` segue o formato {"status", "message", "data": {cStat, xMotivo, ...}}.
    """

    http_status: int
    corpo: Dict[str, Any]

    @property
    def dados(self) -> Optional[Dict[str, Any]]:
        data = self.corpo.get("data") if isinstance(self.corpo, dict) else None
        return data if isinstance(data, dict) else None


# ---------------------------------------------------------------------------
# Contrato do gateway
# ---------------------------------------------------------------------------


class SefazGatewayProtocol(Protocol):
    def enviar(self, payload: Dict[str, Any]) -> Resultado[RespostaGateway]:
        ...

    def cancelar(self, payload: Dict[str, Any]) -> Resultado[RespostaGateway]:
        ...

    def encerrar(self, payload: Dict[str, Any]) -> Resultado[RespostaGateway]:
        ...

    def consultar_status(self, payload: Dict[str, Any]) -> Resultado[RespostaGateway]:
        ...

    def consultar_nao_encerrados(self, payload: Dict[str, Any]) -> Resultado[RespostaGateway]:
        ...


# ---------------------------------------------------------------------------
# Client HTTP real
# ---------------------------------------------------------------------------


class HttpSefazGateway:
    """
    Client HTTP do gateway MDF-e.

    Todas as operações são POST <base_url>/<operação> com JSON, bearer token
    e timeout limitado (30s por padrão).
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout: float = TIMEOUT_PADRAO,
        user_agent: str = "MDFe-SaaS-Backend/1.0",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.user_agent = user_agent
        self.http = session or requests

    def _url(self, endpoint: str) -> str:
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
            "User-Agent": self.user_agent,
        }

    def _post(self, operacao: str, endpoint: str, payload: Dict[str, Any]) -> Resultado[RespostaGateway]:
        url = self._url(endpoint)
        log_extra = {"event": "sefaz_gateway", "operacao": operacao, "url": url}

        try:
            resp = self.http.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.warning("sefaz_gateway_timeout", extra={**log_extra, "timeout": self.timeout, "error": str(exc)})
            return falha(
                TIMEOUT_ERROR,
                f"Timeout na comunicação com a SEFAZ ({int(self.timeout)}s).",
                details={"operacao": operacao},
            )
        except requests.ConnectionError as exc:
            logger.error("sefaz_gateway_conexao", extra={**log_extra, "error": str(exc)})
            return falha(
                SEFAZ_ERROR,
                "Falha de conexão com a SEFAZ.",
                details={"operacao": operacao, "error": str(exc)},
            )
        except requests.RequestException as exc:
            logger.exception("sefaz_gateway_erro", extra={**log_extra, "error": str(exc)})
            return falha(
                INTERNAL_ERROR,
                "Erro inesperado na comunicação com a SEFAZ.",
                details={"operacao": operacao, "error": str(exc)},
            )

        try:
            corpo = resp.json()
        except ValueError:
            corpo = None

        http_status = resp.status_code

        if not 200 <= http_status < 300:
            logger.error(
                "sefaz_gateway_http_erro",
                extra={**log_extra, "http_status": http_status},
            )
            mensagem = None
            if isinstance(corpo, dict):
                mensagem = corpo.get("message") or corpo.get("error")
            return falha(
                SEFAZ_ERROR,
                f"Erro na comunicação com SEFAZ: HTTP {http_status}",
                details={"http_status": http_status, "message": mensagem},
                dados={"http_status": http_status, "corpo": corpo if corpo is not None else resp.text},
            )

        if not isinstance(corpo, dict):
            logger.error(
                "sefaz_gateway_json_invalido",
                extra={**log_extra, "http_status": http_status},
            )
            return falha(
                INTERNAL_ERROR,
                "Resposta da SEFAZ não é um JSON válido.",
                details={"http_status": http_status},
                dados={"http_status": http_status, "corpo": resp.text},
            )

        logger.info("sefaz_gateway_ok", extra={**log_extra, "http_status": http_status})
        return Ok(RespostaGateway(http_status=http_status, corpo=corpo))

    def enviar(self, payload):
        return self._post("envio", ENDPOINT_ENVIO, payload)

    def cancelar(self, payload):
        return self._post("cancelamento", ENDPOINT_CANCELAMENTO, payload)

    def encerrar(self, payload):
        return self._post("encerramento", ENDPOINT_ENCERRAMENTO, payload)

    def consultar_status(self, payload):
        return self._post("status", ENDPOINT_STATUS, payload)

    def consultar_nao_encerrados(self, payload):
        return self._post("nao_encerrados", ENDPOINT_NAO_ENCERRADOS, payload)


# ---------------------------------------------------------------------------
# Implementação mock
# ---------------------------------------------------------------------------


class MockSefazGateway:
    """
    Gateway mock para desenvolvimento (MDFE_GATEWAY_MOCK=1).

    Autoriza todo envio (cStat 100) e homologa todo evento (cStat 135).
    A chave gerada tem 44 dígitos, como a real.
    """

    def __init__(self, *, uf: str = "35"):
        self.uf = uf

    def _resposta(self, data: Dict[str, Any], message: str) -> Resultado[RespostaGateway]:
        return Ok(RespostaGateway(http_status=200, corpo={"status": 200, "message": message, "data": data}))

    def _chave(self) -> str:
        return (self.uf + str(uuid.uuid4().int))[:44].ljust(44, "0")

    def enviar(self, payload):
        return self._resposta(
            {
                "cStat": 100,
                "xMotivo": "Autorizado o uso do MDF-e (mock)",
                "chMDFe": self._chave(),
                "nProt": f"9{uuid.uuid4().int % 10**14:014d}",
                "dataProcessamento": timezone.now().isoformat(),
                "xml": None,
                "pdfBase64": None,
            },
            "MDF-e autorizado (mock)",
        )

    def _evento(self, chave: Optional[str], message: str):
        return self._resposta(
            {
                "cStat": 135,
                "xMotivo": "Evento registrado e vinculado a MDF-e (mock)",
                "chMDFe": chave,
                "nProt": f"9{uuid.uuid4().int % 10**14:014d}",
                "dataProcessamento": timezone.now().isoformat(),
            },
            message,
        )

    def cancelar(self, payload):
        return self._evento(payload.get("chaveMdfe"), "Cancelamento homologado (mock)")

    def encerrar(self, payload):
        return self._evento((payload.get("evento") or {}).get("chave"), "Encerramento homologado (mock)")

    def consultar_status(self, payload):
        agora = timezone.now().isoformat()
        return self._resposta(
            {
                "tpAmb": str(payload.get("tpAmb") or "2"),
                "verAplic": "MOCK-1.0",
                "cStat": 107,
                "xMotivo": "Serviço em Operação (mock)",
                "cUF": payload.get("cUF"),
                "dhRecbto": agora,
                "tMed": "1",
                "dhRetorno": agora,
            },
            "Status consultado (mock)",
        )

    def consultar_nao_encerrados(self, payload):
        return self._resposta(
            {"cStat": 112, "xMotivo": "Nenhum MDF-e não encerrado (mock)", "items": []},
            "Consulta realizada (mock)",
        )

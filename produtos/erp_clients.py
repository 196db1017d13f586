"""
Client do ERP (API Tiny) para atualização de preços.

Mesmo contrato do client SEFAZ: nenhuma operação levanta exceção, o
resultado é Ok(RespostaErp) para HTTP 2xx com `retorno` válido, ou Falha
com ERP_ERROR / TIMEOUT_ERROR / INTERNAL_ERROR.

O ERP autentica por token na query string, não por header.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import requests

from mdfe.resultado import ERP_ERROR, INTERNAL_ERROR, TIMEOUT_ERROR, Ok, Resultado, falha

logger = logging.getLogger("mdfe.sefaz")

ENDPOINT_ATUALIZAR_PRECOS = "produto.atualizar.precos.php"

TIMEOUT_PADRAO = 30.0


@dataclass(frozen=True)
class RespostaErp:
    """
    Resposta 2xx do ERP. `retorno` = {"status", "status_processamento",
    "registros"?: [{"registro": {...}}], "erros"?: [{"erro": ...}]}.
    """

    http_status: int
    corpo: Dict[str, Any]

    @property
    def retorno(self) -> Dict[str, Any]:
        return self.corpo["retorno"]

    @property
    def registros(self) -> List[Dict[str, Any]]:
        itens = self.retorno.get("registros") or []
        return [
            item["registro"]
            for item in itens
            if isinstance(item, dict) and isinstance(item.get("registro"), dict)
        ]


class ErpGatewayProtocol(Protocol):
    def atualizar_precos(self, payload: Dict[str, Any]) -> Resultado[RespostaErp]:
        ...


class HttpErpGateway:
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

    def _post(self, operacao: str, endpoint: str, payload: Dict[str, Any]) -> Resultado[RespostaErp]:
        url = f"{self.base_url}/{endpoint}"
        log_extra = {"event": "erp_gateway", "operacao": operacao, "url": url}

        try:
            resp = self.http.post(
                url,
                params={"token": self.token},
                json=payload,
                headers={"Content-Type": "application/json", "User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.warning("erp_gateway_timeout", extra={**log_extra, "timeout": self.timeout, "error": str(exc)})
            return falha(
                TIMEOUT_ERROR,
                f"Timeout na comunicação com o ERP ({int(self.timeout)}s).",
                details={"operacao": operacao},
            )
        except requests.ConnectionError as exc:
            logger.error("erp_gateway_conexao", extra={**log_extra, "error": str(exc)})
            return falha(
                ERP_ERROR,
                "Falha de conexão com o ERP.",
                details={"operacao": operacao, "error": str(exc)},
            )
        except requests.RequestException as exc:
            logger.exception("erp_gateway_erro", extra={**log_extra, "error": str(exc)})
            return falha(
                INTERNAL_ERROR,
                "Erro inesperado na comunicação com o ERP.",
                details={"operacao": operacao, "error": str(exc)},
            )

        try:
            corpo = resp.json()
        except ValueError:
            corpo = None

        http_status = resp.status_code

        if not 200 <= http_status < 300:
            logger.error("erp_gateway_http_erro", extra={**log_extra, "http_status": http_status})
            mensagem = None
            if isinstance(corpo, dict):
                mensagem = corpo.get("message") or corpo.get("error")
            return falha(
                ERP_ERROR,
                mensagem or f"Erro na comunicação com o ERP: HTTP {http_status}",
                details={"http_status": http_status},
            )

        if not isinstance(corpo, dict) or not isinstance(corpo.get("retorno"), dict):
            logger.error("erp_gateway_resposta_invalida", extra={**log_extra, "http_status": http_status})
            return falha(
                ERP_ERROR,
                "Resposta inválida da API do ERP.",
                details={"http_status": http_status},
            )

        logger.info("erp_gateway_ok", extra={**log_extra, "http_status": http_status})
        return Ok(RespostaErp(http_status=http_status, corpo=corpo))

    def atualizar_precos(self, payload):
        return self._post("atualizar_precos", ENDPOINT_ATUALIZAR_PRECOS, payload)

import json

import pytest
import requests
from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings

from mdfe import sefaz_clients
from mdfe.resultado import INTERNAL_ERROR, SEFAZ_ERROR, TIMEOUT_ERROR, Falha, Ok
from mdfe.sefaz_clients import HttpSefazGateway, MockSefazGateway
from mdfe.sefaz_factory import get_sefaz_gateway

BASE_URL = "http://gateway.test/api/v1/mdfe"


class _FakeResponse:
    def __init__(self, status_code=200, corpo=None, texto=None):
        self.status_code = status_code
        self._corpo = corpo
        self.text = texto if texto is not None else json.dumps(corpo)

    def json(self):
        if self._corpo is None:
            raise ValueError("sem JSON")
        return self._corpo


class _Chamadas:
    def __init__(self, resposta=None, erro=None):
        self.resposta = resposta
        self.erro = erro
        self.registro = []

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.registro.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.erro is not None:
            raise self.erro
        return self.resposta


def _gateway(**kwargs):
    return HttpSefazGateway(base_url=BASE_URL + "/", token="abc123", **kwargs)


def test_envio_ok_envia_bearer_json_e_timeout(monkeypatch):
    corpo = {"status": 200, "message": "ok", "data": {"cStat": 100, "xMotivo": "Autorizado"}}
    post = _Chamadas(resposta=_FakeResponse(200, corpo))
    monkeypatch.setattr(sefaz_clients.requests, "post", post)

    res = _gateway().enviar({"ide": {}})

    assert isinstance(res, Ok)
    assert res.valor.http_status == 200
    assert res.valor.dados == corpo["data"]

    chamada = post.registro[0]
    assert chamada["url"] == BASE_URL
    assert chamada["json"] == {"ide": {}}
    assert chamada["timeout"] == 30.0
    assert chamada["headers"]["Authorization"] == "Bearer abc123"
    assert chamada["headers"]["Content-Type"] == "application/json"


@pytest.mark.parametrize(
    "metodo, sufixo",
    [
        ("cancelar", "/evento/cancelamento"),
        ("encerrar", "/evento/encerramento"),
        ("consultar_status", "/status"),
        ("consultar_nao_encerrados", "/consulta/nao-encerrados"),
    ],
)
def test_endpoints_das_operacoes(monkeypatch, metodo, sufixo):
    post = _Chamadas(resposta=_FakeResponse(200, {"data": {"cStat": 135}}))
    monkeypatch.setattr(sefaz_clients.requests, "post", post)

    getattr(_gateway(), metodo)({})

    assert post.registro[0]["url"] == BASE_URL + sufixo


def test_timeout_vira_timeout_error_sem_dados_de_resposta(monkeypatch):
    monkeypatch.setattr(sefaz_clients.requests, "post", _Chamadas(erro=requests.Timeout("lento")))

    res = _gateway(timeout=5).enviar({})

    assert isinstance(res, Falha)
    assert res.erro.code == TIMEOUT_ERROR
    assert res.dados is None


def test_falha_de_conexao_vira_sefaz_error(monkeypatch):
    monkeypatch.setattr(sefaz_clients.requests, "post", _Chamadas(erro=requests.ConnectionError("recusada")))

    res = _gateway().cancelar({})

    assert isinstance(res, Falha)
    assert res.erro.code == SEFAZ_ERROR
    assert res.dados is None


def test_http_nao_2xx_vira_sefaz_error_com_corpo(monkeypatch):
    corpo = {"status": 503, "message": "SEFAZ indisponível"}
    monkeypatch.setattr(sefaz_clients.requests, "post", _Chamadas(resposta=_FakeResponse(503, corpo)))

    res = _gateway().encerrar({})

    assert isinstance(res, Falha)
    assert res.erro.code == SEFAZ_ERROR
    assert "503" in res.erro.message
    assert res.erro.details["message"] == "SEFAZ indisponível"
    assert res.dados == {"http_status": 503, "corpo": corpo}


def test_http_nao_2xx_sem_json_guarda_texto(monkeypatch):
    monkeypatch.setattr(
        sefaz_clients.requests,
        "post",
        _Chamadas(resposta=_FakeResponse(502, None, texto="<html>Bad Gateway</html>")),
    )

    res = _gateway().enviar({})

    assert isinstance(res, Falha)
    assert res.erro.code == SEFAZ_ERROR
    assert res.dados["corpo"] == "<html>Bad Gateway</html>"


def test_2xx_com_json_invalido_vira_internal_error(monkeypatch):
    monkeypatch.setattr(
        sefaz_clients.requests,
        "post",
        _Chamadas(resposta=_FakeResponse(200, None, texto="não é json")),
    )

    res = _gateway().enviar({})

    assert isinstance(res, Falha)
    assert res.erro.code == INTERNAL_ERROR
    assert res.dados == {"http_status": 200, "corpo": "não é json"}


def test_session_injetada_e_usada_no_lugar_do_modulo_requests(monkeypatch):
    class _Sessao:
        def __init__(self):
            self.post = _Chamadas(resposta=_FakeResponse(200, {"data": {"cStat": 107}}))

    def _proibido(*args, **kwargs):
        raise AssertionError("requests.post não deveria ser chamado")

    monkeypatch.setattr(sefaz_clients.requests, "post", _proibido)
    sessao = _Sessao()

    res = _gateway(session=sessao).consultar_status({"cUF": 35})

    assert isinstance(res, Ok)
    assert len(sessao.post.registro) == 1


# ---------------------------------------------------------------------------
# Mock e factory
# ---------------------------------------------------------------------------


def test_mock_gateway_autoriza_envio_e_homologa_eventos():
    mock = MockSefazGateway()

    envio = mock.enviar({})
    cancelamento = mock.cancelar({"chaveMdfe": "3" * 44})
    nao_encerrados = mock.consultar_nao_encerrados({})

    assert envio.valor.dados["cStat"] == 100
    assert len(envio.valor.dados["chMDFe"]) == 44
    assert cancelamento.valor.dados["cStat"] == 135
    assert cancelamento.valor.dados["chMDFe"] == "3" * 44
    assert nao_encerrados.valor.dados["items"] == []


@override_settings(MDFE_GATEWAY_MOCK=True)
def test_factory_devolve_mock_quando_habilitado():
    assert isinstance(get_sefaz_gateway(), MockSefazGateway)


@override_settings(MDFE_GATEWAY_MOCK=False, MDFE_API_URL=BASE_URL, MDFE_TOKEN="tk", MDFE_API_TIMEOUT=12)
def test_factory_devolve_client_http_configurado():
    gateway = get_sefaz_gateway()

    assert isinstance(gateway, HttpSefazGateway)
    assert gateway.base_url == BASE_URL
    assert gateway.token == "tk"
    assert gateway.timeout == 12.0


@override_settings(MDFE_GATEWAY_MOCK=False, MDFE_API_URL="", MDFE_TOKEN="tk")
def test_factory_sem_url_e_erro_de_configuracao():
    with pytest.raises(ImproperlyConfigured):
        get_sefaz_gateway()


@override_settings(MDFE_GATEWAY_MOCK=False, MDFE_API_URL=BASE_URL, MDFE_TOKEN="")
def test_factory_sem_token_e_erro_de_configuracao():
    with pytest.raises(ImproperlyConfigured):
        get_sefaz_gateway()

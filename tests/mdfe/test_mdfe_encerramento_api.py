from datetime import datetime
from datetime import timezone as dt_timezone

import pytest
from django.db import DatabaseError
from django.utils import timezone

from commons.tests.helpers import CHAVE_AUTORIZADA, PROTOCOLO_AUTORIZADO, resposta_gateway
from mdfe.models import MdfeEvento, MdfeRetorno, MdfeStatus
from mdfe.resultado import TIMEOUT_ERROR, falha

URL_ENCERRAMENTO = "/api/sefaz/encerramento"


def _encerrar(client, documento, **extra):
    body = {
        "mdfeId": str(documento.id),
        "ufEncerramento": "SP",
        "municipioEncerramento": "São Paulo",
        **extra,
    }
    return client.post(URL_ENCERRAMENTO, body, format="json")


@pytest.mark.django_db
def test_encerramento_aceito_resolve_municipio_e_encerra(
    api_client, documento_autorizado, municipios_ibge, fake_gateway
):
    doc = documento_autorizado(horas_desde_autorizacao=48)

    resp = _encerrar(api_client, doc, municipioEncerramento="sao paulo", dataEncerramento="2026-10-19T10:30:00-03:00")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["status"] == "encerrado"
    assert body["data"]["cUFEncerramento"] == "35"
    assert body["data"]["cMunEncerramento"] == "3550308"
    assert body["data"]["dtEncerramento"] == "2026-10-19T10:30:00-03:00"

    doc.refresh_from_db()
    assert doc.status == MdfeStatus.ENCERRADO

    operacao, payload = fake_gateway.chamadas[0]
    assert operacao == "encerramento"
    assert payload["evento"]["tpEvento"] == "110112"
    assert payload["evento"]["chave"] == CHAVE_AUTORIZADA
    assert payload["evento"]["nProt"] == PROTOCOLO_AUTORIZADO
    assert payload["mdfe"]["ide"]["nMDF"] == 1

    evento = MdfeEvento.objects.get(documento=doc)
    assert evento.tp_evento == "110112"
    assert evento.tipo_evento == "encerramento"
    assert MdfeRetorno.objects.filter(documento=doc, tipo_operacao="encerramento").count() == 1


@pytest.mark.django_db
def test_encerramento_sem_data_usa_agora(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado()
    antes = timezone.now()

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 200
    dt = datetime.fromisoformat(fake_gateway.chamadas[0][1]["evento"]["dtEncerramento"])
    assert dt.tzinfo is not None
    assert antes <= dt <= timezone.now()


@pytest.mark.django_db
def test_encerramento_aceita_data_hora_iso_em_utc(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc, dataEncerramento="2026-10-19T14:30:00.000Z")

    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "encerrado"
    dt = datetime.fromisoformat(fake_gateway.chamadas[0][1]["evento"]["dtEncerramento"])
    assert dt == datetime(2026, 10, 19, 14, 30, tzinfo=dt_timezone.utc)


@pytest.mark.django_db
def test_encerramento_aceito_com_cstat_631(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    fake_gateway.responder("encerramento", resposta_gateway(631, "Rejeição: duplicidade de evento"))
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.ENCERRADO


@pytest.mark.django_db
def test_encerramento_rejeitado_mantem_autorizado(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    fake_gateway.responder("encerramento", resposta_gateway(609, "Rejeição: evento não permitido"))
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "SEFAZ_REJECTION"
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.AUTORIZADO
    assert MdfeEvento.objects.get(documento=doc).aceito is False


@pytest.mark.django_db
def test_encerramento_municipio_nao_resolvido_nao_chama_gateway(
    api_client, documento_autorizado, municipios_ibge, fake_gateway
):
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc, municipioEncerramento="Cidade Que Não Existe")

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_REQUIRED_DATA"
    assert fake_gateway.chamadas == []
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.AUTORIZADO


@pytest.mark.django_db
def test_encerramento_municipio_de_outra_uf_nao_resolve(
    api_client, documento_autorizado, municipios_ibge, fake_gateway
):
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc, ufEncerramento="RJ", municipioEncerramento="Campinas")

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_REQUIRED_DATA"


@pytest.mark.django_db
def test_encerramento_codigo_municipio_divergente(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc, codigoMunicipio="3509502")

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert fake_gateway.chamadas == []


@pytest.mark.django_db
def test_encerramento_uf_minuscula_e_aceita(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc, ufEncerramento="rj", municipioEncerramento="Rio de Janeiro")

    assert resp.status_code == 200
    evento = fake_gateway.chamadas[0][1]["evento"]
    assert evento["cUFEncerramento"] == "33"
    assert evento["cMunEncerramento"] == "3304557"


@pytest.mark.django_db
def test_encerramento_apos_30_dias_e_bloqueado(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado(horas_desde_autorizacao=24 * 31)

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "BUSINESS_RULE_VIOLATION"
    assert fake_gateway.chamadas == []


@pytest.mark.django_db
def test_encerramento_sem_protocolo_e_bloqueado(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado(protocolo=None)

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "BUSINESS_RULE_VIOLATION"
    assert fake_gateway.chamadas == []


@pytest.mark.django_db
def test_encerramento_de_cancelado_e_bloqueado(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    doc = documento_autorizado(status=MdfeStatus.CANCELADO)

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "BUSINESS_RULE_VIOLATION"


@pytest.mark.django_db
def test_encerramento_timeout(api_client, documento_autorizado, municipios_ibge, fake_gateway):
    fake_gateway.responder("encerramento", falha(TIMEOUT_ERROR, "Timeout na comunicação com a SEFAZ (30s)."))
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 504
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.AUTORIZADO
    assert not MdfeEvento.objects.exists()
    assert not MdfeRetorno.objects.exists()


@pytest.mark.django_db
@pytest.mark.parametrize(
    "body_extra, campo",
    [
        ({"ufEncerramento": "SAO"}, "ufEncerramento"),
        ({"codigoMunicipio": "123"}, "codigoMunicipio"),
        ({"dataEncerramento": "19/10/2026"}, "dataEncerramento"),
        ({"nSeqEvento": 99}, "nSeqEvento"),
    ],
)
def test_encerramento_entrada_invalida(api_client, documento_autorizado, fake_gateway, body_extra, campo):
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc, **body_extra)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert campo in body["error"]["details"]


@pytest.mark.django_db
def test_encerramento_falha_ao_gravar_evento_nao_muda_o_resultado(
    api_client, documento_autorizado, municipios_ibge, fake_gateway, monkeypatch
):
    def _quebra(**kwargs):
        raise DatabaseError("disco cheio")

    monkeypatch.setattr(MdfeEvento.objects, "create", _quebra)
    doc = documento_autorizado()

    resp = _encerrar(api_client, doc)

    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "encerrado"
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.ENCERRADO
    assert not MdfeEvento.objects.exists()
    assert MdfeRetorno.objects.filter(documento=doc).count() == 1

import pytest
from rest_framework.test import APIClient

URL_UF = "/api/v1/endereco/uf/"
URL_MUNICIPIO = "/api/v1/endereco/municipio/"


@pytest.mark.django_db
def test_lista_municipios_por_uf(api_client, municipios_ibge):
    resp = api_client.get(URL_MUNICIPIO, {"uf__sigla": "SP"})

    assert resp.status_code == 200
    nomes = [m["nome"] for m in resp.json()]
    assert nomes == ["Campinas", "São Paulo"]
    assert {m["uf_sigla"] for m in resp.json()} == {"SP"}


@pytest.mark.django_db
def test_busca_municipio_por_codigo(api_client, municipios_ibge):
    resp = api_client.get(URL_MUNICIPIO, {"search": "3304557"})

    assert [m["nome"] for m in resp.json()] == ["Rio de Janeiro"]


@pytest.mark.django_db
def test_lista_ufs(api_client, municipios_ibge):
    resp = api_client.get(URL_UF)

    assert resp.status_code == 200
    assert [uf["sigla"] for uf in resp.json()] == ["RJ", "SP"]


@pytest.mark.django_db
def test_enderecos_sao_somente_leitura(api_client, municipios_ibge):
    resp = api_client.post(URL_UF, {"sigla": "MG", "nome": "Minas Gerais", "codigo_ibge": "31"}, format="json")

    assert resp.status_code == 405


@pytest.mark.django_db
def test_enderecos_exigem_autenticacao(municipios_ibge):
    assert APIClient().get(URL_UF).status_code == 401

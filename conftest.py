# conftest.py (na raiz do projeto)

from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from commons.tests.helpers import (
    CHAVE_AUTORIZADA,
    CNPJ_EMITENTE,
    EMPRESA1,
    EMPRESA2,
    PROTOCOLO_AUTORIZADO,
    TENANT1,
    TENANT2,
    FakeSefazGateway,
    secoes_validas,
)
from enderecos.models import UF, Municipio
from mdfe.models import MdfeCertificado, MdfeDocumento, MdfeStatus
from usuario.contexto import ContextoTenant


# =============================================================================
# USUÁRIOS / TENANT
# =============================================================================

@pytest.fixture
def user_tenant(db):
    User = get_user_model()
    return User.objects.create_user(
        username="operador-t1",
        password="123456",
        id_tenant=TENANT1,
        id_empresa=EMPRESA1,
    )


@pytest.fixture
def user_outro_tenant(db):
    User = get_user_model()
    return User.objects.create_user(
        username="operador-t2",
        password="123456",
        id_tenant=TENANT2,
        id_empresa=EMPRESA2,
    )


@pytest.fixture
def user_sem_tenant(db):
    User = get_user_model()
    return User.objects.create_user(username="sem-tenant", password="123456")


@pytest.fixture
def contexto(user_tenant):
    return ContextoTenant(
        id_tenant=user_tenant.id_tenant,
        id_empresa=user_tenant.id_empresa,
        user_id=user_tenant.id,
        username=user_tenant.username,
    )


@pytest.fixture
def api_client(user_tenant):
    client = APIClient()
    client.force_authenticate(user=user_tenant)
    return client


@pytest.fixture
def api_client_outro_tenant(user_outro_tenant):
    client = APIClient()
    client.force_authenticate(user=user_outro_tenant)
    return client


# =============================================================================
# MDF-e
# =============================================================================

@pytest.fixture
def certificado_valido(db):
    return MdfeCertificado.objects.create(
        id_tenant=TENANT1,
        id_empresa=EMPRESA1,
        cpfcnpj=CNPJ_EMITENTE,
        arquivo_pfx=b"PFX-FAKE",
        senha="segredo",
        validade=timezone.now() + timedelta(days=180),
    )


@pytest.fixture
def documento_factory(db):
    """
    Cria MdfeDocumento do tenant 1 com seções válidas; qualquer campo pode
    ser sobrescrito por kwargs.
    """

    def _criar(**kwargs):
        dados = {
            "id_tenant": TENANT1,
            "id_empresa": EMPRESA1,
            "status": MdfeStatus.PENDENTE,
            **secoes_validas(),
        }
        dados.update(kwargs)
        return MdfeDocumento.objects.create(**dados)

    return _criar


@pytest.fixture
def documento_autorizado(documento_factory):
    """
    Factory de MDF-e autorizado há `horas_desde_autorizacao` horas.
    """

    def _criar(horas_desde_autorizacao=2, **kwargs):
        ide = secoes_validas()["ide"]
        ide["nMDF"] = 1
        dados = {
            "status": MdfeStatus.AUTORIZADO,
            "ide": ide,
            "chave": CHAVE_AUTORIZADA,
            "protocolo": PROTOCOLO_AUTORIZADO,
            "data_hora_autorizacao": timezone.now() - timedelta(hours=horas_desde_autorizacao),
        }
        dados.update(kwargs)
        return documento_factory(**dados)

    return _criar


@pytest.fixture
def gateway():
    return FakeSefazGateway()


@pytest.fixture
def fake_gateway(monkeypatch, gateway):
    """
    Substitui a factory usada pelas views SEFAZ pelo gateway fake.
    """
    monkeypatch.setattr("mdfe.views.sefaz_views.get_sefaz_gateway", lambda: gateway)
    return gateway


# =============================================================================
# ENDEREÇOS
# =============================================================================

@pytest.fixture
def municipios_ibge(db):
    sp = UF.objects.create(sigla="SP", nome="São Paulo", codigo_ibge="35")
    rj = UF.objects.create(sigla="RJ", nome="Rio de Janeiro", codigo_ibge="33")
    return {
        "SP": sp,
        "RJ": rj,
        "sao_paulo": Municipio.objects.create(nome="São Paulo", uf=sp, codigo_ibge="3550308"),
        "campinas": Municipio.objects.create(nome="Campinas", uf=sp, codigo_ibge="3509502"),
        "rio": Municipio.objects.create(nome="Rio de Janeiro", uf=rj, codigo_ibge="3304557"),
    }

import pytest

from commons.tests.helpers import EMPRESA1, TENANT1, FakeSefazGateway
from mdfe.models import MdfeDocumento, MdfeEvento, MdfeStatus
from mdfe.resultado import MDFE_NOT_FOUND, STATUS_CONFLICT, UNAUTHORIZED, Falha, Ok
from mdfe.services import documento_service
from mdfe.services.envio_service import enviar_mdfe
from usuario.contexto import ContextoTenant, contexto_do_usuario


@pytest.mark.django_db
def test_atualizar_status_condicional(documento_factory):
    doc = documento_factory()

    res = documento_service.atualizar_status(
        doc,
        status_esperado=MdfeStatus.PENDENTE,
        novo_status=MdfeStatus.AUTORIZADO,
        campos={"protocolo": "999"},
    )

    assert isinstance(res, Ok)
    assert doc.status == MdfeStatus.AUTORIZADO
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.AUTORIZADO
    assert doc.protocolo == "999"


@pytest.mark.django_db
def test_atualizar_status_com_status_divergente_e_conflito(documento_factory):
    doc = documento_factory(status=MdfeStatus.CANCELADO)

    res = documento_service.atualizar_status(
        doc,
        status_esperado=MdfeStatus.AUTORIZADO,
        novo_status=MdfeStatus.ENCERRADO,
    )

    assert isinstance(res, Falha)
    assert res.erro.code == STATUS_CONFLICT
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.CANCELADO


@pytest.mark.django_db
def test_envio_concorrente_devolve_conflito_sem_sobrescrever(contexto, documento_factory, certificado_valido):
    """
    Outra request autoriza o documento enquanto o gateway processa:
    a atualização condicional não encontra mais o status 'pendente'.
    """
    doc = documento_factory()

    class _GatewayConcorrente(FakeSefazGateway):
        def enviar(self, payload):
            MdfeDocumento.objects.filter(pk=doc.pk).update(status=MdfeStatus.ERRO, mensagem_sefaz="outra request")
            return super().enviar(payload)

    res = enviar_mdfe(contexto=contexto, mdfe_id=doc.id, gateway=_GatewayConcorrente())

    assert isinstance(res, Falha)
    assert res.erro.code == STATUS_CONFLICT
    doc.refresh_from_db()
    assert doc.status == MdfeStatus.ERRO
    assert doc.mensagem_sefaz == "outra request"
    # A resposta do gateway fica auditada mesmo assim
    assert MdfeEvento.objects.filter(documento=doc).count() == 1


@pytest.mark.django_db
def test_carregar_documento_respeita_empresa(documento_factory):
    doc = documento_factory(id_empresa=99)
    contexto = ContextoTenant(id_tenant=TENANT1, id_empresa=EMPRESA1)

    res = documento_service.carregar_documento(doc.id, contexto)

    assert isinstance(res, Falha)
    assert res.erro.code == MDFE_NOT_FOUND


@pytest.mark.django_db
def test_carregar_documento_com_id_invalido(contexto):
    res = documento_service.carregar_documento("nao-e-uuid", contexto)

    assert isinstance(res, Falha)
    assert res.erro.code == MDFE_NOT_FOUND


@pytest.mark.django_db
def test_exigir_tenant(user_tenant, user_sem_tenant):
    assert isinstance(documento_service.exigir_tenant(user_tenant), Ok)

    res = documento_service.exigir_tenant(user_sem_tenant)
    assert isinstance(res, Falha)
    assert res.erro.code == UNAUTHORIZED


@pytest.mark.django_db
def test_contexto_do_usuario(user_tenant):
    contexto = contexto_do_usuario(user_tenant)

    assert contexto == ContextoTenant(
        id_tenant=TENANT1,
        id_empresa=EMPRESA1,
        user_id=user_tenant.id,
        username="operador-t1",
    )
    assert contexto_do_usuario(None) is None

from datetime import datetime

import pytest
from django.utils import timezone

from commons.tests.helpers import CHAVE_AUTORIZADA, CNPJ_EMITENTE, PROTOCOLO_AUTORIZADO, secoes_validas
from enderecos.services.municipio_service import MunicipioResolvido
from mdfe.models import MdfeDocumento, MdfeStatus
from mdfe.resultado import MISSING_REQUIRED_DATA, VALIDATION_ERROR, Falha, Ok
from mdfe.services.payload_service import (
    DadosEncerramento,
    montar_payload_cancelamento,
    montar_payload_encerramento,
    montar_payload_envio,
)


class _LookupFixo:
    """
    Lookup de município em memória: {(UF, nome): codigo}.
    """

    def __init__(self, tabela=None):
        self.tabela = tabela or {("SP", "São Paulo"): 3550308}
        self.consultas = []

    def resolver(self, uf, nome):
        self.consultas.append((uf, nome))
        codigo = self.tabela.get((uf, nome))
        if codigo is None:
            return None
        return MunicipioResolvido(codigo_ibge=codigo, nome=nome, uf=uf)


def _documento(**kwargs):
    """
    MdfeDocumento em memória (não precisa de banco para montar payload).
    """
    ide = secoes_validas()["ide"]
    ide["nMDF"] = 15
    dados = {"id_tenant": 1, "id_empresa": 10, **secoes_validas(), "ide": ide}
    dados.update(kwargs)
    return MdfeDocumento(**dados)


def _autorizado(**kwargs):
    dados = {
        "status": MdfeStatus.AUTORIZADO,
        "chave": CHAVE_AUTORIZADA,
        "protocolo": PROTOCOLO_AUTORIZADO,
    }
    dados.update(kwargs)
    return _documento(**dados)


# ---------------------------------------------------------------------------
# Envio
# ---------------------------------------------------------------------------


def test_payload_envio_valido_em_camel_case():
    res = montar_payload_envio(_documento())

    assert isinstance(res, Ok)
    payload = res.valor
    assert set(["ide", "emit", "infModal", "infDoc", "tot", "infAdic"]).issubset(payload)
    assert payload["ide"]["nMDF"] == 15
    assert payload["emit"]["CNPJ"] == CNPJ_EMITENTE
    assert payload["infModal"]["rodo"]["placaVeiculo"] == "ABC1D23"


def test_payload_envio_sem_cnpj_emitente_e_dado_ausente():
    emit = secoes_validas()["emit"]
    emit.pop("CNPJ")

    res = montar_payload_envio(_documento(emit=emit))

    assert isinstance(res, Falha)
    assert res.erro.code == MISSING_REQUIRED_DATA


def test_payload_envio_cnpj_numerico_vira_texto():
    emit = secoes_validas()["emit"]
    emit["CNPJ"] = int(CNPJ_EMITENTE)

    res = montar_payload_envio(_documento(emit=emit))

    assert isinstance(res, Ok)
    assert res.valor["emit"]["CNPJ"] == CNPJ_EMITENTE


def test_payload_envio_cnpj_numerico_curto_e_erro_de_validacao():
    emit = secoes_validas()["emit"]
    emit["CNPJ"] = 123

    res = montar_payload_envio(_documento(emit=emit))

    assert isinstance(res, Falha)
    assert res.erro.code == VALIDATION_ERROR
    assert "emit" in res.erro.details


def test_payload_cancelamento_cnpj_numerico_vira_texto():
    emit = secoes_validas()["emit"]
    emit["CNPJ"] = int(CNPJ_EMITENTE)

    res = montar_payload_cancelamento(_autorizado(emit=emit), justificativa="Erro na digitação dos dados")

    assert isinstance(res, Ok)
    assert res.valor["cnpjcpf"] == CNPJ_EMITENTE


def test_payload_envio_sem_secao_obrigatoria_e_dado_ausente():
    res = montar_payload_envio(_documento(tot={}))

    assert isinstance(res, Falha)
    assert res.erro.code == MISSING_REQUIRED_DATA
    assert "tot" in res.erro.details


def test_payload_envio_sem_modal_e_dado_ausente():
    res = montar_payload_envio(_documento(inf_modal={"versaoModal": "3.00"}))

    assert isinstance(res, Falha)
    assert res.erro.code == MISSING_REQUIRED_DATA


def test_payload_envio_com_valor_malformado_e_erro_de_validacao():
    inf_modal = secoes_validas()["inf_modal"]
    inf_modal["rodo"]["placaVeiculo"] = "placa-invalida"

    res = montar_payload_envio(_documento(inf_modal=inf_modal))

    assert isinstance(res, Falha)
    assert res.erro.code == VALIDATION_ERROR
    assert "infModal" in res.erro.details


def test_payload_envio_sem_condutor_e_invalido():
    inf_modal = secoes_validas()["inf_modal"]
    inf_modal["rodo"]["condutores"] = []

    res = montar_payload_envio(_documento(inf_modal=inf_modal))

    assert isinstance(res, Falha)


# ---------------------------------------------------------------------------
# Cancelamento
# ---------------------------------------------------------------------------


def test_payload_cancelamento():
    res = montar_payload_cancelamento(
        _autorizado(),
        justificativa="  Erro na digitação da placa do veículo  ",
        n_seq_evento=2,
    )

    assert isinstance(res, Ok)
    assert res.valor == {
        "cnpjcpf": CNPJ_EMITENTE,
        "chaveMdfe": CHAVE_AUTORIZADA,
        "nProt": PROTOCOLO_AUTORIZADO,
        "cUF": "35",
        "id_tenant": 1,
        "id_empresa": 10,
        "tpEvento": "110111",
        "nSeqEvento": 2,
        "justificativa": "Erro na digitação da placa do veículo",
    }


@pytest.mark.parametrize("justificativa", ["", "   ", "curta demais", "x" * 256])
def test_payload_cancelamento_justificativa_fora_do_tamanho(justificativa):
    res = montar_payload_cancelamento(_autorizado(), justificativa=justificativa)

    assert isinstance(res, Falha)
    assert res.erro.code == VALIDATION_ERROR


def test_payload_cancelamento_justificativa_nos_limites():
    assert isinstance(montar_payload_cancelamento(_autorizado(), justificativa="x" * 15), Ok)
    assert isinstance(montar_payload_cancelamento(_autorizado(), justificativa="x" * 255), Ok)


@pytest.mark.parametrize("n_seq", [0, 21, -1])
def test_payload_cancelamento_n_seq_evento_fora_da_faixa(n_seq):
    res = montar_payload_cancelamento(
        _autorizado(),
        justificativa="Justificativa suficientemente longa",
        n_seq_evento=n_seq,
    )

    assert isinstance(res, Falha)
    assert res.erro.code == VALIDATION_ERROR


def test_payload_cancelamento_sem_protocolo_e_dado_ausente():
    res = montar_payload_cancelamento(
        _autorizado(protocolo=None),
        justificativa="Justificativa suficientemente longa",
    )

    assert isinstance(res, Falha)
    assert res.erro.code == MISSING_REQUIRED_DATA
    assert res.erro.details == {"campos": ["protocolo"]}


def test_payload_cancelamento_usa_uf_da_chave_quando_ide_nao_tem_cuf():
    ide = secoes_validas()["ide"]
    ide.pop("cUF")

    res = montar_payload_cancelamento(
        _autorizado(ide=ide, chave="41" + CHAVE_AUTORIZADA[2:]),
        justificativa="Justificativa suficientemente longa",
    )

    assert isinstance(res, Ok)
    assert res.valor["cUF"] == "41"


# ---------------------------------------------------------------------------
# Encerramento
# ---------------------------------------------------------------------------


def test_payload_encerramento_resolve_municipio():
    lookup = _LookupFixo()
    dados = DadosEncerramento(uf="SP", municipio="São Paulo", data_encerramento="2026-10-19T10:30:00-03:00")

    res = montar_payload_encerramento(_autorizado(), dados, lookup=lookup, n_seq_evento=1)

    assert isinstance(res, Ok)
    evento = res.valor["evento"]
    assert evento == {
        "chave": CHAVE_AUTORIZADA,
        "tpEvento": "110112",
        "nSeqEvento": 1,
        "nProt": PROTOCOLO_AUTORIZADO,
        "cUFEncerramento": "35",
        "cMunEncerramento": "3550308",
        "dtEncerramento": "2026-10-19T10:30:00-03:00",
    }
    assert res.valor["mdfe"]["emit"]["CNPJ"] == CNPJ_EMITENTE
    assert lookup.consultas == [("SP", "São Paulo")]


def test_payload_encerramento_data_padrao_e_agora():
    antes = timezone.now()
    res = montar_payload_encerramento(
        _autorizado(),
        DadosEncerramento(uf="SP", municipio="São Paulo"),
        lookup=_LookupFixo(),
    )

    assert isinstance(res, Ok)
    dt = datetime.fromisoformat(res.valor["evento"]["dtEncerramento"])
    assert antes <= dt <= timezone.now()


def test_payload_encerramento_municipio_nao_encontrado():
    res = montar_payload_encerramento(
        _autorizado(),
        DadosEncerramento(uf="SP", municipio="Cidade Inexistente"),
        lookup=_LookupFixo(),
    )

    assert isinstance(res, Falha)
    assert res.erro.code == MISSING_REQUIRED_DATA


def test_payload_encerramento_uf_invalida_nao_consulta_municipio():
    lookup = _LookupFixo()

    res = montar_payload_encerramento(
        _autorizado(),
        DadosEncerramento(uf="XX", municipio="São Paulo"),
        lookup=lookup,
    )

    assert isinstance(res, Falha)
    assert res.erro.code == VALIDATION_ERROR
    assert lookup.consultas == []


def test_payload_encerramento_codigo_informado_divergente():
    res = montar_payload_encerramento(
        _autorizado(),
        DadosEncerramento(uf="SP", municipio="São Paulo", codigo_municipio="3509502"),
        lookup=_LookupFixo(),
    )

    assert isinstance(res, Falha)
    assert res.erro.code == VALIDATION_ERROR
    assert res.erro.details["codigoResolvido"] == 3550308


def test_payload_encerramento_codigo_informado_igual_ao_resolvido():
    res = montar_payload_encerramento(
        _autorizado(),
        DadosEncerramento(uf="SP", municipio="São Paulo", codigo_municipio="3550308"),
        lookup=_LookupFixo(),
    )

    assert isinstance(res, Ok)


def test_payload_encerramento_sem_chave_e_dado_ausente():
    res = montar_payload_encerramento(
        _autorizado(chave=None),
        DadosEncerramento(uf="SP", municipio="São Paulo"),
        lookup=_LookupFixo(),
    )

    assert isinstance(res, Falha)
    assert res.erro.code == MISSING_REQUIRED_DATA

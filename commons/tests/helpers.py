# commons/tests/helpers.py
from mdfe.resultado import Ok
from mdfe.sefaz_clients import RespostaGateway

TENANT1 = 1
TENANT2 = 2
EMPRESA1 = 10
EMPRESA2 = 20

CNPJ_EMITENTE = "11222333000181"
CHAVE_AUTORIZADA = "35" + "2610" + CNPJ_EMITENTE + "58" + "001" + "000000001" + "1" + "00000001" + "0"
PROTOCOLO_AUTORIZADO = "935260000000001"
PROTOCOLO_EVENTO = "935260000000099"


def secoes_validas() -> dict:
    """
    Seções fiscais completas de um MDF-e rodoviário SP -> RJ, no formato
    aceito por MdfeDocumento.objects.create(**secoes_validas()).

    Sem ide.nMDF: o envio sorteia o número.
    """
    return {
        "ide": {
            "cUF": "35",
            "tpAmb": "2",
            "tpEmit": "1",
            "tpEmis": "1",
            "mod": "58",
            "serie": 1,
            "modal": "1",
            "dhEmi": "2026-10-19T10:00:00-03:00",
            "UFIni": "SP",
            "UFFim": "RJ",
            "infMunCarrega": [{"cMunCarrega": "3550308", "xMunCarrega": "São Paulo"}],
        },
        "emit": {
            "CNPJ": CNPJ_EMITENTE,
            "IE": "123456789110",
            "xNome": "Transportes Teste LTDA",
            "enderEmit": {
                "xLgr": "Rua das Flores",
                "nro": "100",
                "xBairro": "Centro",
                "cMun": "3550308",
                "xMun": "São Paulo",
                "CEP": "01001000",
                "UF": "SP",
            },
        },
        "inf_modal": {
            "versaoModal": "3.00",
            "rodo": {
                "placaVeiculo": "ABC1D23",
                "tara": 8000,
                "capacidadeKG": 20000,
                "condutores": [{"xNome": "João da Silva", "CPF": "12345678909"}],
            },
        },
        "inf_doc": {
            "infMunDescarga": [
                {
                    "cMunDescarga": "3304557",
                    "xMunDescarga": "Rio de Janeiro",
                    "infNFe": [{"chave": "3" * 44}],
                }
            ]
        },
        "tot": {"qNFe": 1, "vCarga": "15000.00", "cUnid": "01", "qCarga": "1200.0000"},
        "inf_adic": {"infCpl": "Carga de teste"},
    }


def resposta_gateway(c_stat, x_motivo="Processado", http_status=200, **campos):
    """
    Ok(RespostaGateway) no formato devolvido pelo gateway:
    {"status", "message", "data": {"cStat", "xMotivo", ...}}.
    """
    data = {"cStat": c_stat, "xMotivo": x_motivo, **campos}
    corpo = {"status": http_status, "message": x_motivo, "data": data}
    return Ok(RespostaGateway(http_status=http_status, corpo=corpo))


class FakeSefazGateway:
    """
    Gateway em memória para os testes de services e views.

    - Registra cada chamada em `chamadas` como (operacao, payload).
    - `responder(operacao, resultado)` fixa o Resultado de uma operação;
      sem configuração, envio autoriza (100) e eventos homologam (135).
    """

    def __init__(self):
        self.chamadas = []
        self.respostas = {}

    def responder(self, operacao, resultado):
        self.respostas[operacao] = resultado

    def operacoes(self):
        return [op for op, _ in self.chamadas]

    def _chamar(self, operacao, payload):
        self.chamadas.append((operacao, payload))
        if operacao in self.respostas:
            return self.respostas[operacao]
        if operacao == "envio":
            return resposta_gateway(
                100,
                "Autorizado o uso do MDF-e",
                nProt=PROTOCOLO_AUTORIZADO,
                chMDFe=CHAVE_AUTORIZADA,
                dataProcessamento="2026-10-19T10:00:05-03:00",
            )
        if operacao in ("cancelamento", "encerramento"):
            return resposta_gateway(135, "Evento registrado e vinculado a MDF-e", nProt=PROTOCOLO_EVENTO)
        if operacao == "status":
            return resposta_gateway(107, "Serviço em Operação", tpAmb="1", cUF=35)
        return resposta_gateway(112, "Consulta realizada", items=[])

    def enviar(self, payload):
        return self._chamar("envio", payload)

    def cancelar(self, payload):
        return self._chamar("cancelamento", payload)

    def encerrar(self, payload):
        return self._chamar("encerramento", payload)

    def consultar_status(self, payload):
        return self._chamar("status", payload)

    def consultar_nao_encerrados(self, payload):
        return self._chamar("nao_encerrados", payload)

"""
Serializers do documento MDF-e.

Dois papéis:
  - Validação estrutural das seções fiscais (ide, emit, infModal, infDoc,
    tot), usada pelo montador de payload antes de qualquer chamada ao gateway.
  - CRUD do documento (MdfeDocumentoSerializer), que aceita as seções como
    JSON livre: o rascunho pode ficar incompleto até o envio.
"""

from rest_framework import serializers

from mdfe.models import MdfeArquivo, MdfeDocumento, MdfeEvento

UF_SIGLA_REGEX = r"^[A-Z]{2}$"
CODIGO_UF_REGEX = r"^\d{2}$"
CODIGO_MUNICIPIO_REGEX = r"^\d{7}$"
CNPJ_REGEX = r"^\d{14}$"
CPF_REGEX = r"^\d{11}$"
CHAVE_REGEX = r"^\d{44}$"
PLACA_REGEX = r"^[A-Z]{3}[0-9][A-Z0-9][0-9]{2}$"


# ---------------------------------------------------------------------------
# Seções fiscais
# ---------------------------------------------------------------------------


class MunicipioCarregamentoSerializer(serializers.Serializer):
    cMunCarrega = serializers.RegexField(CODIGO_MUNICIPIO_REGEX)
    xMunCarrega = serializers.CharField(max_length=60)


class IdeSerializer(serializers.Serializer):
    cUF = serializers.RegexField(CODIGO_UF_REGEX)
    tpAmb = serializers.ChoiceField(choices=["1", "2"])
    tpEmit = serializers.ChoiceField(choices=["1", "2", "3"], required=False)
    tpEmis = serializers.ChoiceField(choices=["1", "2"], required=False)
    mod = serializers.CharField(required=False)
    serie = serializers.IntegerField(min_value=0, max_value=999)
    nMDF = serializers.IntegerField(min_value=1, max_value=999999999)
    modal = serializers.ChoiceField(choices=["1", "2", "3", "4"])
    dhEmi = serializers.CharField(required=False)
    UFIni = serializers.RegexField(UF_SIGLA_REGEX)
    UFFim = serializers.RegexField(UF_SIGLA_REGEX)
    infMunCarrega = MunicipioCarregamentoSerializer(many=True, required=False)

    def to_internal_value(self, data):
        # Formulários mandam cUF/tpAmb/modal como número ou texto
        if isinstance(data, dict):
            data = dict(data)
            for campo in ("cUF", "tpAmb", "tpEmit", "tpEmis", "modal"):
                if isinstance(data.get(campo), int):
                    data[campo] = str(data[campo])
        return super().to_internal_value(data)


class EnderecoEmitenteSerializer(serializers.Serializer):
    xLgr = serializers.CharField(max_length=60)
    nro = serializers.CharField(max_length=60)
    xCpl = serializers.CharField(max_length=60, required=False, allow_blank=True)
    xBairro = serializers.CharField(max_length=60)
    cMun = serializers.RegexField(CODIGO_MUNICIPIO_REGEX, required=False)
    xMun = serializers.CharField(max_length=60)
    CEP = serializers.RegexField(r"^\d{8}$", required=False)
    UF = serializers.RegexField(UF_SIGLA_REGEX)


class EmitSerializer(serializers.Serializer):
    CNPJ = serializers.RegexField(CNPJ_REGEX)
    IE = serializers.CharField(max_length=14, required=False)
    xNome = serializers.CharField(max_length=60)
    xFant = serializers.CharField(max_length=60, required=False, allow_blank=True)
    enderEmit = EnderecoEmitenteSerializer(required=False)


class CondutorSerializer(serializers.Serializer):
    xNome = serializers.CharField(max_length=60)
    CPF = serializers.RegexField(CPF_REGEX)


class RodoSerializer(serializers.Serializer):
    placaVeiculo = serializers.RegexField(PLACA_REGEX)
    renavam = serializers.CharField(max_length=11, required=False, allow_blank=True)
    tara = serializers.IntegerField(min_value=0)
    capacidadeKG = serializers.IntegerField(min_value=0, required=False)
    capacidadeM3 = serializers.IntegerField(min_value=0, required=False)
    condutores = CondutorSerializer(many=True, allow_empty=False)
    infANTT = serializers.DictField(required=False)


class AquavSerializer(serializers.Serializer):
    irin = serializers.CharField(max_length=10)
    tpEmb = serializers.CharField(max_length=2, required=False)
    cEmbar = serializers.CharField(max_length=10, required=False)
    xEmbar = serializers.CharField(max_length=60)
    nViag = serializers.CharField(max_length=10)


class InfModalSerializer(serializers.Serializer):
    versaoModal = serializers.CharField(required=False)
    rodo = RodoSerializer(required=False)
    aquav = AquavSerializer(required=False)

    def validate(self, attrs):
        if not attrs.get("rodo") and not attrs.get("aquav"):
            raise serializers.ValidationError(
                {"rodo": ["Informe o modal rodoviário (rodo) ou aquaviário (aquav)."]},
                code="required",
            )
        return attrs


class InfDocEmitidoSerializer(serializers.Serializer):
    chave = serializers.RegexField(CHAVE_REGEX)


class MunicipioDescargaSerializer(serializers.Serializer):
    cMunDescarga = serializers.RegexField(CODIGO_MUNICIPIO_REGEX)
    xMunDescarga = serializers.CharField(max_length=60)
    infCTe = InfDocEmitidoSerializer(many=True, required=False)
    infNFe = InfDocEmitidoSerializer(many=True, required=False)


class InfDocSerializer(serializers.Serializer):
    infMunDescarga = MunicipioDescargaSerializer(many=True, allow_empty=False)


class TotSerializer(serializers.Serializer):
    qCTe = serializers.IntegerField(min_value=0, required=False)
    qNFe = serializers.IntegerField(min_value=0, required=False)
    qMDFe = serializers.IntegerField(min_value=0, required=False)
    vCarga = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    cUnid = serializers.ChoiceField(choices=["01", "02"])
    qCarga = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)


class DocumentoFiscalSerializer(serializers.Serializer):
    """
    Documento completo, no formato camelCase aceito pelo gateway.
    """

    ide = IdeSerializer()
    emit = EmitSerializer()
    infModal = InfModalSerializer()
    infDoc = InfDocSerializer()
    tot = TotSerializer()
    infAdic = serializers.DictField(required=False)


# ---------------------------------------------------------------------------
# CRUD do documento
# ---------------------------------------------------------------------------


class MdfeDocumentoSerializer(serializers.ModelSerializer):
    infModal = serializers.JSONField(source="inf_modal", required=False)
    infDoc = serializers.JSONField(source="inf_doc", required=False)
    infAdic = serializers.JSONField(source="inf_adic", required=False)

    class Meta:
        model = MdfeDocumento
        fields = [
            "id",
            "id_tenant",
            "id_empresa",
            "status",
            "ide",
            "emit",
            "infModal",
            "infDoc",
            "tot",
            "infAdic",
            "chave",
            "protocolo",
            "data_hora_autorizacao",
            "mensagem_sefaz",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "id_tenant",
            "id_empresa",
            "status",
            "chave",
            "protocolo",
            "data_hora_autorizacao",
            "mensagem_sefaz",
            "created_at",
            "updated_at",
        ]

    def _validar_objeto(self, value, campo):
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError(f"{campo} deve ser um objeto JSON.")
        return value

    def validate_ide(self, value):
        return self._validar_objeto(value, "ide")

    def validate_emit(self, value):
        return self._validar_objeto(value, "emit")

    def validate_infModal(self, value):
        return self._validar_objeto(value, "infModal")

    def validate_infDoc(self, value):
        return self._validar_objeto(value, "infDoc")

    def validate_tot(self, value):
        return self._validar_objeto(value, "tot")

    def validate_infAdic(self, value):
        return self._validar_objeto(value, "infAdic")


class MdfeEventoSerializer(serializers.ModelSerializer):
    class Meta:
        model = MdfeEvento
        fields = [
            "id",
            "documento",
            "chave",
            "tp_evento",
            "tipo_evento",
            "n_seq_evento",
            "protocolo",
            "c_stat",
            "x_motivo",
            "dh_evento",
            "aceito",
            "user_id",
            "created_at",
        ]
        read_only_fields = fields


class MdfeArquivoSerializer(serializers.ModelSerializer):
    class Meta:
        model = MdfeArquivo
        fields = ["id", "documento", "chave", "xml", "pdf_base64", "updated_at"]
        read_only_fields = fields

from rest_framework import serializers

from mdfe.services.payload_service import JUSTIFICATIVA_MAX, JUSTIFICATIVA_MIN, N_SEQ_EVENTO_MAX


class EnvioMdfeInputSerializer(serializers.Serializer):
    mdfeId = serializers.UUIDField()


class CancelamentoMdfeInputSerializer(serializers.Serializer):
    mdfeId = serializers.UUIDField()
    justificativa = serializers.CharField(
        min_length=JUSTIFICATIVA_MIN,
        max_length=JUSTIFICATIVA_MAX,
        trim_whitespace=True,
    )
    nSeqEvento = serializers.IntegerField(min_value=1, max_value=N_SEQ_EVENTO_MAX, required=False)


class EncerramentoMdfeInputSerializer(serializers.Serializer):
    mdfeId = serializers.UUIDField()
    ufEncerramento = serializers.RegexField(r"^[A-Za-z]{2}$")
    municipioEncerramento = serializers.CharField(max_length=60)
    codigoMunicipio = serializers.RegexField(r"^\d{7}$", required=False, allow_blank=True)
    dataEncerramento = serializers.DateTimeField(required=False)
    nSeqEvento = serializers.IntegerField(min_value=1, max_value=N_SEQ_EVENTO_MAX, required=False)

    def validate_ufEncerramento(self, value):
        return value.upper()


class StatusSefazQuerySerializer(serializers.Serializer):
    uf = serializers.IntegerField(min_value=11, max_value=53, default=35)
    ambiente = serializers.ChoiceField(choices=["1", "2"], default="1")


class NaoEncerradosInputSerializer(serializers.Serializer):
    cnpj = serializers.RegexField(r"^\d{14}$")

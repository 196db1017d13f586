from rest_framework import serializers

from enderecos.services.municipio_service import codigo_uf
from mdfe.models import MdfeEmitente

CPF_CNPJ_REGEX = r"^(\d{11}|\d{14})$"


class MdfeEmitenteSerializer(serializers.ModelSerializer):
    cpfcnpj = serializers.RegexField(CPF_CNPJ_REGEX)
    # aceita máscara (00000-000); grava só os dígitos
    cep = serializers.CharField(max_length=9, required=False, allow_blank=True)

    class Meta:
        model = MdfeEmitente
        fields = [
            "id",
            "id_tenant",
            "id_empresa",
            "cpfcnpj",
            "razao_social",
            "fantasia",
            "ie",
            "logradouro",
            "numero",
            "complemento",
            "bairro",
            "nome_municipio",
            "codigo_municipio",
            "uf",
            "cep",
            "telefone",
            "email",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "id_tenant", "codigo_municipio", "created_at", "updated_at"]

    def validate_uf(self, value):
        sigla = (value or "").strip().upper()
        if codigo_uf(sigla) is None:
            raise serializers.ValidationError("UF inválida.")
        return sigla

    def validate_cep(self, value):
        digitos = "".join(c for c in (value or "") if c.isdigit())
        if digitos and len(digitos) != 8:
            raise serializers.ValidationError("CEP deve ter 8 dígitos.")
        return digitos

    def validate_cpfcnpj(self, value):
        """
        Um CNPJ/CPF por tenant.
        """
        contexto = self.context.get("contexto")
        if contexto is None:
            return value

        qs = MdfeEmitente.objects.filter(id_tenant=contexto.id_tenant, cpfcnpj=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Já existe um emitente com este CNPJ/CPF.")
        return value

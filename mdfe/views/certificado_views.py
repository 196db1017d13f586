# mdfe/views/certificado_views.py

import logging

from rest_framework import serializers, status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from mdfe.models import MdfeCertificado
from mdfe.permissions import HasTenant
from usuario.contexto import contexto_do_usuario

logger = logging.getLogger("mdfe.sefaz")


class CertificadoUploadSerializer(serializers.Serializer):
    cpfcnpj = serializers.RegexField(r"^(\d{11}|\d{14})$")
    arquivo = serializers.FileField()
    senha = serializers.CharField(max_length=128)
    validade = serializers.DateTimeField()

    def validate_arquivo(self, value):
        nome = (getattr(value, "name", "") or "").lower()
        if not (nome.endswith(".pfx") or nome.endswith(".p12")):
            raise serializers.ValidationError("Arquivo deve ser um certificado .pfx ou .p12.")
        return value


class CertificadoOutputSerializer(serializers.ModelSerializer):
    class Meta:
        model = MdfeCertificado
        fields = ["id", "cpfcnpj", "validade", "created_at", "updated_at"]
        read_only_fields = fields


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated, HasTenant])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def certificado_view(request):
    """
    GET  /api/v1/mdfe/certificado/  -> certificado atual do tenant/empresa
    POST /api/v1/mdfe/certificado/  -> cadastra ou substitui (multipart)

    A senha e o conteúdo do PFX nunca são devolvidos.
    """
    contexto = contexto_do_usuario(request.user)

    if request.method == "GET":
        cert = MdfeCertificado.objects.filter(
            id_tenant=contexto.id_tenant,
            id_empresa=contexto.id_empresa,
        ).first()
        if cert is None:
            return Response(
                {
                    "success": False,
                    "message": "Certificado digital não cadastrado.",
                    "error": {"code": "NOT_FOUND", "message": "Certificado digital não cadastrado."},
                },
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"success": True, "data": CertificadoOutputSerializer(cert).data})

    ser_in = CertificadoUploadSerializer(data=request.data)
    ser_in.is_valid(raise_exception=True)
    data = ser_in.validated_data

    cert, criado = MdfeCertificado.objects.update_or_create(
        id_tenant=contexto.id_tenant,
        id_empresa=contexto.id_empresa,
        defaults={
            "cpfcnpj": data["cpfcnpj"],
            "arquivo_pfx": data["arquivo"].read(),
            "senha": data["senha"],
            "validade": data["validade"],
        },
    )

    logger.info(
        "mdfe_certificado_salvo",
        extra={
            "event": "mdfe_certificado",
            "id_tenant": contexto.id_tenant,
            "id_empresa": contexto.id_empresa,
            "user_id": contexto.user_id,
            "criado": criado,
        },
    )

    return Response(
        {
            "success": True,
            "message": "Certificado cadastrado com sucesso" if criado else "Certificado atualizado com sucesso",
            "data": CertificadoOutputSerializer(cert).data,
        },
        status=status.HTTP_201_CREATED if criado else status.HTTP_200_OK,
    )

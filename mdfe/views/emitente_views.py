# mdfe/views/emitente_views.py

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from mdfe.models import MdfeEmitente
from mdfe.permissions import HasTenant
from mdfe.serializers_emitente import MdfeEmitenteSerializer
from mdfe.services.emitente_service import (
    emitente_da_empresa,
    emitentes_do_tenant,
    resolver_codigo_municipio,
)
from usuario.contexto import contexto_do_usuario

logger = logging.getLogger("mdfe.sefaz")


class MdfeEmitenteViewSet(viewsets.ModelViewSet):
    """
    CRUD de emitentes do tenant.

    Filtros: ?cpfcnpj=, ?uf=, ?id_empresa=
    GET emitentes/empresa/ devolve o emitente da empresa do usuário.
    """

    serializer_class = MdfeEmitenteSerializer
    permission_classes = [permissions.IsAuthenticated, HasTenant]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["cpfcnpj", "uf", "id_empresa"]
    search_fields = ["razao_social", "fantasia", "cpfcnpj"]

    def _contexto(self):
        return contexto_do_usuario(self.request.user)

    def get_queryset(self):
        contexto = self._contexto()
        if contexto is None:
            return MdfeEmitente.objects.none()
        return emitentes_do_tenant(contexto)

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        ctx["contexto"] = self._contexto()
        return ctx

    def perform_create(self, serializer):
        contexto = self._contexto()
        data = serializer.validated_data
        emitente = serializer.save(
            id_tenant=contexto.id_tenant,
            id_empresa=data.get("id_empresa", contexto.id_empresa),
            codigo_municipio=resolver_codigo_municipio(data["uf"], data.get("nome_municipio", "")),
        )
        logger.info(
            "mdfe_emitente_criado",
            extra={
                "event": "mdfe_emitente",
                "id_tenant": contexto.id_tenant,
                "user_id": contexto.user_id,
                "emitente_id": str(emitente.id),
            },
        )

    def perform_update(self, serializer):
        instance = serializer.instance
        data = serializer.validated_data
        uf = data.get("uf", instance.uf)
        nome_municipio = data.get("nome_municipio", instance.nome_municipio)
        emitente = serializer.save(codigo_municipio=resolver_codigo_municipio(uf, nome_municipio))
        logger.info(
            "mdfe_emitente_atualizado",
            extra={
                "event": "mdfe_emitente",
                "id_tenant": emitente.id_tenant,
                "emitente_id": str(emitente.id),
            },
        )

    def perform_destroy(self, instance):
        logger.info(
            "mdfe_emitente_excluido",
            extra={
                "event": "mdfe_emitente",
                "id_tenant": instance.id_tenant,
                "emitente_id": str(instance.id),
            },
        )
        instance.delete()

    @action(detail=False, methods=["get"])
    def empresa(self, request):
        emitente = emitente_da_empresa(self._contexto())
        if emitente is None:
            mensagem = "Emitente não encontrado para a empresa do usuário."
            return Response(
                {
                    "success": False,
                    "message": mensagem,
                    "error": {"code": "NOT_FOUND", "message": mensagem},
                },
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(self.get_serializer(emitente).data)

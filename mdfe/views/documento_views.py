# mdfe/views/documento_views.py

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from mdfe.models import MdfeDocumento, MdfeStatus
from mdfe.permissions import HasTenant
from mdfe.serializers_documento import (
    MdfeArquivoSerializer,
    MdfeDocumentoSerializer,
    MdfeEventoSerializer,
)
from mdfe.services.documento_service import documentos_do_tenant
from mdfe.services.status_service import pode_editar
from usuario.contexto import contexto_do_usuario

logger = logging.getLogger("mdfe.sefaz")


class MdfeDocumentoViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    CRUD de MDF-e (rascunhos e consulta).

    - Isolamento por tenant/empresa do usuário em toda leitura e escrita.
    - Edição só em pendente/erro/rejeitado; um rejeitado editado volta a pendente.
    - Não existe exclusão: o manifesto é histórico fiscal.
    - Status, chave e protocolo só mudam pelos endpoints /api/sefaz/*.
    """

    serializer_class = MdfeDocumentoSerializer
    permission_classes = [permissions.IsAuthenticated, HasTenant]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["status"]
    search_fields = ["chave", "protocolo"]

    def _contexto(self):
        return contexto_do_usuario(self.request.user)

    def get_queryset(self):
        contexto = self._contexto()
        if contexto is None:
            return MdfeDocumento.objects.none()
        return documentos_do_tenant(contexto)

    def perform_create(self, serializer):
        contexto = self._contexto()
        documento = serializer.save(
            id_tenant=contexto.id_tenant,
            id_empresa=contexto.id_empresa,
            status=MdfeStatus.PENDENTE,
        )
        logger.info(
            "mdfe_documento_criado",
            extra={
                "event": "mdfe_documento",
                "id_tenant": contexto.id_tenant,
                "user_id": contexto.user_id,
                "mdfe_id": str(documento.id),
            },
        )

    def update(self, request, *args, **kwargs):
        documento = self.get_object()
        admissivel = pode_editar(documento.status)
        if not admissivel.permitido:
            return Response(
                {
                    "success": False,
                    "message": admissivel.motivo,
                    "error": {"code": "BUSINESS_RULE_VIOLATION", "message": admissivel.motivo},
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().update(request, *args, **kwargs)

    def perform_update(self, serializer):
        extra = {}
        if serializer.instance.status == MdfeStatus.REJEITADO:
            extra["status"] = MdfeStatus.PENDENTE
        documento = serializer.save(**extra)
        logger.info(
            "mdfe_documento_atualizado",
            extra={
                "event": "mdfe_documento",
                "id_tenant": documento.id_tenant,
                "mdfe_id": str(documento.id),
                "status": documento.status,
            },
        )

    @action(detail=True, methods=["get"])
    def eventos(self, request, pk=None):
        documento = self.get_object()
        ser = MdfeEventoSerializer(documento.eventos.all(), many=True)
        return Response(ser.data)

    @action(detail=True, methods=["get"])
    def arquivos(self, request, pk=None):
        documento = self.get_object()
        ser = MdfeArquivoSerializer(documento.arquivos.all(), many=True)
        return Response(ser.data)

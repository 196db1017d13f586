# produtos/views/preco_views.py

import logging

from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from mdfe.permissions import HasTenant
from mdfe.resultado import INTERNAL_ERROR, VALIDATION_ERROR, Falha, http_status_para
from produtos.erp_factory import get_erp_gateway
from produtos.serializers import HistoricoPrecoQuerySerializer, PrecoItemSerializer, ProdutoPrecoLogSerializer
from produtos.services.preco_service import atualizar_precos, historico_precos
from usuario.contexto import contexto_do_usuario

logger = logging.getLogger("mdfe.sefaz")


def _erro(code: str, message: str, http_status: int, details=None) -> Response:
    erro = {"code": code, "message": message}
    if details is not None:
        erro["details"] = details
    return Response({"success": False, "message": message, "error": erro}, status=http_status)


@api_view(["POST"])
@permission_classes([IsAuthenticated, HasTenant])
def atualizar_precos_view(request):
    """
    POST /api/v1/produtos/precos/atualizar/
    Body: [{"id": "<id no ERP>", "preco": "10.50"}, ...]

    200 quando todos os registros foram aceitos; 207 quando o ERP recusou
    parte deles (success=false, resumo e detalhes por registro).
    """
    contexto = contexto_do_usuario(request.user)

    ser_in = PrecoItemSerializer(data=request.data, many=True, allow_empty=False)
    if not ser_in.is_valid():
        logger.warning(
            "produto_preco_validacao",
            extra={"event": "produto_preco", "user_id": contexto.user_id, "errors": ser_in.errors},
        )
        return _erro(VALIDATION_ERROR, "Dados de entrada inválidos", status.HTTP_400_BAD_REQUEST, ser_in.errors)

    try:
        resultado = atualizar_precos(contexto=contexto, itens=ser_in.validated_data, gateway=get_erp_gateway())
    except ImproperlyConfigured as exc:
        logger.exception(
            "produto_preco_configuracao_erro",
            extra={"event": "produto_preco", "user_id": contexto.user_id, "error": str(exc)},
        )
        return _erro(INTERNAL_ERROR, "Erro interno do servidor", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(resultado, Falha):
        erro = resultado.erro
        return _erro(erro.code, erro.message, http_status_para(erro.code), erro.details)

    data = resultado.valor
    sucessos = data["resumo"]["sucessos"]
    erros = data["resumo"]["erros"]

    if erros:
        message = f"{sucessos} preços atualizados com sucesso, {erros} falharam"
        http_status = status.HTTP_207_MULTI_STATUS
    else:
        message = f"{sucessos} preços atualizados com sucesso"
        http_status = status.HTTP_200_OK

    return Response({"success": not erros, "message": message, "data": data}, status=http_status)


@api_view(["GET"])
@permission_classes([IsAuthenticated, HasTenant])
def historico_precos_view(request):
    """
    GET /api/v1/produtos/precos/historico/?codigo=<id no ERP>
    """
    contexto = contexto_do_usuario(request.user)

    ser_in = HistoricoPrecoQuerySerializer(data=request.query_params)
    if not ser_in.is_valid():
        return _erro(
            VALIDATION_ERROR,
            "Parâmetro 'codigo' é obrigatório",
            status.HTTP_400_BAD_REQUEST,
            ser_in.errors,
        )

    codigo = ser_in.validated_data["codigo"]
    logs = historico_precos(contexto, codigo)
    data = ProdutoPrecoLogSerializer(logs, many=True).data

    return Response(
        {
            "success": True,
            "message": "Histórico de preços carregado",
            "data": data,
            "meta": {
                "codigo": codigo,
                "total_alteracoes": len(data),
                "usuario": contexto.username,
                "timestamp": timezone.now().isoformat(),
            },
        },
        status=status.HTTP_200_OK,
    )

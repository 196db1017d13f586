# mdfe/views/sefaz_views.py

import logging

from django.core.exceptions import ImproperlyConfigured
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from mdfe.resultado import INTERNAL_ERROR, SEFAZ_REJECTION, VALIDATION_ERROR, Falha, http_status_para
from mdfe.sefaz_factory import get_sefaz_gateway
from mdfe.serializers_sefaz import (
    CancelamentoMdfeInputSerializer,
    EncerramentoMdfeInputSerializer,
    EnvioMdfeInputSerializer,
    NaoEncerradosInputSerializer,
    StatusSefazQuerySerializer,
)
from mdfe.services.cancelamento_service import cancelar_mdfe
from mdfe.services.consulta_service import consultar_nao_encerrados, consultar_status_sefaz
from mdfe.services.documento_service import exigir_tenant
from mdfe.services.encerramento_service import encerrar_mdfe
from mdfe.services.envio_service import enviar_mdfe
from mdfe.services.payload_service import DadosEncerramento

logger = logging.getLogger("mdfe.sefaz")


def _resposta(resultado) -> Response:
    """
    Converte um Resultado no envelope HTTP:

      sucesso: {"success": true, "message", "data", "protocolo"?}
      falha:   {"success": false, "message", "error": {...}, "data"?}
    """
    if isinstance(resultado, Falha):
        erro = resultado.erro
        body = {"success": False, "message": erro.message, "error": erro.as_dict()}
        if erro.code == SEFAZ_REJECTION and resultado.dados:
            body["data"] = resultado.dados
        return Response(body, status=http_status_para(erro.code))

    saida = resultado.valor
    body = {"success": True, "message": saida.message, "data": saida.data}
    if saida.protocolo:
        body["protocolo"] = saida.protocolo
    return Response(body, status=status.HTTP_200_OK)


def _erro_validacao(serializer, evento: str, user_id) -> Response:
    logger.warning(
        f"{evento}_validacao",
        extra={"event": evento, "user_id": user_id, "errors": serializer.errors, "outcome": "validation_error"},
    )
    return Response(
        {
            "success": False,
            "message": "Dados de entrada inválidos",
            "error": {
                "code": VALIDATION_ERROR,
                "message": "Dados de entrada inválidos",
                "details": serializer.errors,
            },
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _erro_interno(evento: str, user_id, exc: Exception) -> Response:
    logger.exception(
        f"{evento}_erro",
        extra={"event": evento, "user_id": user_id, "error": str(exc)},
    )
    return Response(
        {
            "success": False,
            "message": "Erro interno do servidor",
            "error": {"code": INTERNAL_ERROR, "message": "Erro interno do servidor"},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def envio_view(request):
    """
    POST /api/sefaz/envio
    Body: {"mdfeId": "<uuid>"}
    """
    user_id = getattr(request.user, "id", None)

    res_contexto = exigir_tenant(request.user)
    if isinstance(res_contexto, Falha):
        return _resposta(res_contexto)

    ser_in = EnvioMdfeInputSerializer(data=request.data)
    if not ser_in.is_valid():
        return _erro_validacao(ser_in, "mdfe_enviar", user_id)

    try:
        resultado = enviar_mdfe(
            contexto=res_contexto.valor,
            mdfe_id=ser_in.validated_data["mdfeId"],
            gateway=get_sefaz_gateway(),
        )
    except ImproperlyConfigured as exc:
        return _erro_interno("mdfe_enviar_configuracao", user_id, exc)
    except Exception as exc:
        return _erro_interno("mdfe_enviar", user_id, exc)

    return _resposta(resultado)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def cancelamento_view(request):
    """
    POST /api/sefaz/cancelamento
    Body: {"mdfeId": "<uuid>", "justificativa": "...", "nSeqEvento"?: 1}
    """
    user_id = getattr(request.user, "id", None)

    res_contexto = exigir_tenant(request.user)
    if isinstance(res_contexto, Falha):
        return _resposta(res_contexto)

    ser_in = CancelamentoMdfeInputSerializer(data=request.data)
    if not ser_in.is_valid():
        return _erro_validacao(ser_in, "mdfe_cancelar", user_id)
    data = ser_in.validated_data

    try:
        resultado = cancelar_mdfe(
            contexto=res_contexto.valor,
            mdfe_id=data["mdfeId"],
            justificativa=data["justificativa"],
            n_seq_evento=data.get("nSeqEvento"),
            gateway=get_sefaz_gateway(),
        )
    except ImproperlyConfigured as exc:
        return _erro_interno("mdfe_cancelar_configuracao", user_id, exc)
    except Exception as exc:
        return _erro_interno("mdfe_cancelar", user_id, exc)

    return _resposta(resultado)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def encerramento_view(request):
    """
    POST /api/sefaz/encerramento
    Body: {"mdfeId", "ufEncerramento", "municipioEncerramento",
           "codigoMunicipio"?, "dataEncerramento"?, "nSeqEvento"?}
    """
    user_id = getattr(request.user, "id", None)

    res_contexto = exigir_tenant(request.user)
    if isinstance(res_contexto, Falha):
        return _resposta(res_contexto)

    ser_in = EncerramentoMdfeInputSerializer(data=request.data)
    if not ser_in.is_valid():
        return _erro_validacao(ser_in, "mdfe_encerrar", user_id)
    data = ser_in.validated_data

    data_encerramento = data.get("dataEncerramento")
    dados = DadosEncerramento(
        uf=data["ufEncerramento"],
        municipio=data["municipioEncerramento"],
        codigo_municipio=data.get("codigoMunicipio") or None,
        data_encerramento=data_encerramento.isoformat() if data_encerramento else None,
    )

    try:
        resultado = encerrar_mdfe(
            contexto=res_contexto.valor,
            mdfe_id=data["mdfeId"],
            dados=dados,
            n_seq_evento=data.get("nSeqEvento"),
            gateway=get_sefaz_gateway(),
        )
    except ImproperlyConfigured as exc:
        return _erro_interno("mdfe_encerrar_configuracao", user_id, exc)
    except Exception as exc:
        return _erro_interno("mdfe_encerrar", user_id, exc)

    return _resposta(resultado)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def status_view(request):
    """
    GET /api/sefaz/status?uf=35&ambiente=1
    """
    user_id = getattr(request.user, "id", None)

    res_contexto = exigir_tenant(request.user)
    if isinstance(res_contexto, Falha):
        return _resposta(res_contexto)

    ser_in = StatusSefazQuerySerializer(data=request.query_params)
    if not ser_in.is_valid():
        return _erro_validacao(ser_in, "sefaz_status", user_id)

    try:
        resultado = consultar_status_sefaz(
            contexto=res_contexto.valor,
            c_uf=ser_in.validated_data["uf"],
            ambiente=ser_in.validated_data["ambiente"],
            gateway=get_sefaz_gateway(),
        )
    except ImproperlyConfigured as exc:
        return _erro_interno("sefaz_status_configuracao", user_id, exc)
    except Exception as exc:
        return _erro_interno("sefaz_status", user_id, exc)

    return _resposta(resultado)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def nao_encerrados_view(request):
    """
    POST /api/sefaz/nao-encerrados
    Body: {"cnpj": "<14 dígitos>"}
    """
    user_id = getattr(request.user, "id", None)

    res_contexto = exigir_tenant(request.user)
    if isinstance(res_contexto, Falha):
        return _resposta(res_contexto)

    ser_in = NaoEncerradosInputSerializer(data=request.data)
    if not ser_in.is_valid():
        return _erro_validacao(ser_in, "mdfe_nao_encerrados", user_id)

    try:
        resultado = consultar_nao_encerrados(
            contexto=res_contexto.valor,
            cnpj=ser_in.validated_data["cnpj"],
            gateway=get_sefaz_gateway(),
        )
    except ImproperlyConfigured as exc:
        return _erro_interno("mdfe_nao_encerrados_configuracao", user_id, exc)
    except Exception as exc:
        return _erro_interno("mdfe_nao_encerrados", user_id, exc)

    return _resposta(resultado)

# mdfe/services/numero_service.py
import logging

from django.db import IntegrityError, transaction

from mdfe.models import MdfeDocumento, MdfeNumeracao

logger = logging.getLogger("mdfe.sefaz")


def proximo_numero_mdfe(*, id_tenant: int, id_empresa, serie: int) -> int:
    """
    Sorteia o próximo nMDF da série, sem buracos e sem repetição.

    - Lock pessimista (select_for_update) na linha de numeração.
    - Primeira emissão da série cria a linha em savepoint; se outra request
      criar primeiro, o IntegrityError é absorvido e a linha existente é usada.
    """
    with transaction.atomic():
        try:
            with transaction.atomic():
                MdfeNumeracao.objects.get_or_create(
                    id_tenant=id_tenant,
                    id_empresa=id_empresa,
                    serie=serie,
                )
        except IntegrityError:
            pass

        numeracao = MdfeNumeracao.objects.select_for_update().get(
            id_tenant=id_tenant,
            id_empresa=id_empresa,
            serie=serie,
        )
        numeracao.numero_atual = (numeracao.numero_atual or 0) + 1
        numeracao.save(update_fields=["numero_atual", "updated_at"])

    logger.info(
        "mdfe_numero_reservado",
        extra={
            "event": "mdfe_numeracao",
            "id_tenant": id_tenant,
            "id_empresa": id_empresa,
            "serie": serie,
            "numero": numeracao.numero_atual,
        },
    )
    return numeracao.numero_atual


def garantir_numero(documento: MdfeDocumento):
    """
    Gera ide.nMDF para o documento quando ainda não existe e persiste no JSON.
    Devolve o número (novo ou já existente).
    """
    ide = dict(documento.ide or {})
    atual = ide.get("nMDF")
    if atual not in (None, "", 0, "0"):
        return atual

    try:
        serie = int(ide.get("serie") or 1)
    except (TypeError, ValueError):
        serie = 1

    numero = proximo_numero_mdfe(
        id_tenant=documento.id_tenant,
        id_empresa=documento.id_empresa,
        serie=serie,
    )
    ide["nMDF"] = numero
    ide.setdefault("serie", serie)
    documento.ide = ide
    documento.save(update_fields=["ide", "updated_at"])
    return numero

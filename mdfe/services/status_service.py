# mdfe/services/status_service.py
"""
Regras de admissibilidade do ciclo de vida do MDF-e.

Funções puras de (status, data de autorização, agora): nenhuma consulta ao
banco, nenhuma chamada de rede. As services de envio/cancelamento/encerramento
chamam estas funções antes de montar qualquer payload.

Transições:
  - pendente/erro   --envio aceito-->          autorizado
  - pendente/erro   --envio rejeitado-->       rejeitado/denegado/erro
  - autorizado      --cancelamento (<=24h)-->  cancelado   (terminal)
  - autorizado      --encerramento (<=30d)-->  encerrado   (terminal)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from mdfe.models.mdfe_models import MdfeStatus

PRAZO_CANCELAMENTO = timedelta(hours=24)
PRAZO_ENCERRAMENTO = timedelta(days=30)

STATUS_ENVIAVEIS = frozenset({MdfeStatus.PENDENTE, MdfeStatus.ERRO})
STATUS_TERMINAIS = frozenset({MdfeStatus.CANCELADO, MdfeStatus.ENCERRADO})

# Status em que o documento ainda pode ser editado pelo usuário
STATUS_EDITAVEIS = frozenset({MdfeStatus.PENDENTE, MdfeStatus.ERRO, MdfeStatus.REJEITADO})


@dataclass(frozen=True)
class Admissibilidade:
    permitido: bool
    motivo: Optional[str] = None


PERMITIDO = Admissibilidade(permitido=True)


def _negado(motivo: str) -> Admissibilidade:
    return Admissibilidade(permitido=False, motivo=motivo)


def pode_enviar(status: str) -> Admissibilidade:
    if status in STATUS_ENVIAVEIS:
        return PERMITIDO
    return _negado(
        f"Status inválido para envio: MDF-e está '{status}'. "
        "Só documentos pendentes ou com erro podem ser enviados."
    )


def pode_cancelar(
    status: str,
    data_autorizacao: Optional[datetime],
    agora: datetime,
) -> Admissibilidade:
    """
    Cancelamento: documento autorizado e dentro de 24h da autorização.

    Sem data de autorização registrada não há como calcular o prazo;
    nesse caso o cancelamento não é bloqueado.
    """
    if status != MdfeStatus.AUTORIZADO:
        return _negado(
            f"Status inválido para cancelamento: MDF-e está '{status}'. "
            "Só documentos autorizados podem ser cancelados."
        )

    if data_autorizacao is not None and agora - data_autorizacao > PRAZO_CANCELAMENTO:
        return _negado(
            "Prazo legal expirado: o cancelamento só é permitido em até 24 horas "
            "após a autorização."
        )

    return PERMITIDO


def pode_encerrar(
    status: str,
    data_autorizacao: Optional[datetime],
    agora: datetime,
    protocolo: Optional[str] = None,
    chave: Optional[str] = None,
    exigir_identificacao: bool = False,
) -> Admissibilidade:
    """
    Encerramento: documento autorizado, dentro de 30 dias da autorização e,
    quando `exigir_identificacao`, com protocolo e chave preenchidos.
    """
    if status != MdfeStatus.AUTORIZADO:
        return _negado(
            f"Status inválido para encerramento: MDF-e está '{status}'. "
            "Só documentos autorizados podem ser encerrados."
        )

    if data_autorizacao is not None and agora - data_autorizacao > PRAZO_ENCERRAMENTO:
        return _negado(
            "Prazo legal expirado: o encerramento só é permitido em até 30 dias "
            "após a autorização."
        )

    if exigir_identificacao and (not protocolo or not chave):
        return _negado("MDF-e sem protocolo de autorização ou chave de acesso.")

    return PERMITIDO


def pode_editar(status: str) -> Admissibilidade:
    if status in STATUS_EDITAVEIS:
        return PERMITIDO
    return _negado(f"MDF-e com status '{status}' não pode ser alterado.")

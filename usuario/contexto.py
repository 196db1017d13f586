# usuario/contexto.py
"""
Contexto de tenant explícito.

Os services de MDF-e nunca leem o usuário "atual" de estado global:
a view resolve o ContextoTenant a partir do request e o repassa
como argumento em toda a cadeia.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ContextoTenant:
    id_tenant: int
    id_empresa: Optional[int]
    user_id: Optional[int] = None
    username: str = ""


def contexto_do_usuario(user) -> Optional[ContextoTenant]:
    """
    Monta o ContextoTenant a partir de um usuário autenticado.

    Retorna None quando não há usuário autenticado ou quando o usuário
    não possui tenant associado.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None

    id_tenant = getattr(user, "id_tenant", None)
    if id_tenant is None:
        return None

    return ContextoTenant(
        id_tenant=int(id_tenant),
        id_empresa=getattr(user, "id_empresa", None),
        user_id=getattr(user, "id", None),
        username=getattr(user, "username", "") or "",
    )

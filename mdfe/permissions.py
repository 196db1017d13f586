# mdfe/permissions.py
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import BasePermission

from usuario.contexto import contexto_do_usuario


class HasTenant(BasePermission):
    """
    Exige usuário autenticado com tenant associado (id_tenant).

    - Sem autenticação: deixa o IsAuthenticated responder 401.
    - Autenticado sem tenant: 401 com code UNAUTHORIZED.
    """

    message = "Usuário não autenticado ou sem tenant associado."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        if contexto_do_usuario(user) is None:
            raise NotAuthenticated({"code": "UNAUTHORIZED", "message": self.message})

        return True

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Usuário da aplicação, sempre vinculado a um tenant e a uma empresa.

    id_tenant/id_empresa vêm do cadastro central de clientes e escopam
    todas as leituras e escritas de documentos MDF-e.
    """

    id_tenant = models.IntegerField(
        null=True,
        blank=True,
        help_text="Tenant (cliente) ao qual o usuário pertence.",
    )
    id_empresa = models.IntegerField(
        null=True,
        blank=True,
        help_text="Empresa emitente dentro do tenant.",
    )

    class Meta:
        db_table = "usuario_user"
        indexes = [
            models.Index(fields=["id_tenant", "id_empresa"], name="idx_user_tenant_empresa"),
        ]

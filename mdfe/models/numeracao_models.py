import uuid

from django.db import models


class MdfeNumeracao(models.Model):
    """
    Contador de numeração (nMDF) por tenant/empresa/série.

    A linha é travada com select_for_update ao sortear o próximo número,
    para que dois envios simultâneos nunca recebam o mesmo nMDF.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    id_tenant = models.IntegerField()
    id_empresa = models.IntegerField(null=True, blank=True)
    serie = models.PositiveIntegerField(default=1)
    numero_atual = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "mdfe_numeracao"
        constraints = [
            models.UniqueConstraint(
                fields=["id_tenant", "id_empresa", "serie"],
                name="uniq_mdfe_numeracao_tenant_emp_serie",
            ),
        ]

    def __str__(self):
        return f"Numeração MDF-e tenant={self.id_tenant} serie={self.serie} atual={self.numero_atual}"

import uuid

from django.db import models
from django.utils import timezone


class MdfeCertificado(models.Model):
    """
    Certificado digital A1 (PFX) usado pelo gateway para assinar os eventos.

    Um certificado por (tenant, empresa). O fluxo de eventos só consulta
    existência e validade antes do envio.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    id_tenant = models.IntegerField()
    id_empresa = models.IntegerField(null=True, blank=True)

    cpfcnpj = models.CharField(max_length=14)
    arquivo_pfx = models.BinaryField()
    senha = models.CharField(max_length=128)
    validade = models.DateTimeField()

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "mdfe_certificado"
        constraints = [
            models.UniqueConstraint(
                fields=["id_tenant", "id_empresa"],
                name="uniq_mdfe_certificado_tenant_empresa",
            ),
        ]

    def __str__(self):
        return f"Certificado {self.cpfcnpj} (validade {self.validade:%d/%m/%Y})"

    def esta_valido(self, agora=None) -> bool:
        agora = agora or timezone.now()
        return bool(self.validade and self.validade > agora)

import uuid

from django.db import models
from django.utils import timezone


class MdfeEmitente(models.Model):
    """
    Cadastro do emitente de MDF-e (transportadora / empresa emissora).

    Um CNPJ/CPF por tenant. O código IBGE do município é resolvido a partir
    de UF + nome do município a cada gravação.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    id_tenant = models.IntegerField(db_index=True)
    id_empresa = models.IntegerField(null=True, blank=True)

    cpfcnpj = models.CharField(max_length=14)
    razao_social = models.CharField(max_length=60)
    fantasia = models.CharField(max_length=60, blank=True, default="")
    ie = models.CharField(max_length=14, blank=True, default="")

    logradouro = models.CharField(max_length=60, blank=True, default="")
    numero = models.CharField(max_length=60, blank=True, default="")
    complemento = models.CharField(max_length=60, blank=True, default="")
    bairro = models.CharField(max_length=60, blank=True, default="")
    nome_municipio = models.CharField(max_length=60, blank=True, default="")
    codigo_municipio = models.IntegerField(null=True, blank=True)
    uf = models.CharField(max_length=2)
    cep = models.CharField(max_length=8, blank=True, default="")

    telefone = models.CharField(max_length=20, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "mdfe_emitente"
        ordering = ["razao_social"]
        constraints = [
            models.UniqueConstraint(
                fields=["id_tenant", "cpfcnpj"],
                name="uniq_mdfe_emitente_tenant_cpfcnpj",
            ),
        ]

    def __str__(self):
        return f"{self.razao_social} ({self.cpfcnpj})"

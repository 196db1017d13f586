import uuid

from django.db import models
from django.utils import timezone


class ProdutoPrecoLog(models.Model):
    """
    Histórico de alterações de preço enviadas ao ERP.

    Append-only: uma linha por produto cujo preço o ERP aceitou.
    `produto_id` é o id do produto no ERP, não uma FK local.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    id_tenant = models.IntegerField(db_index=True)
    id_empresa = models.IntegerField(null=True, blank=True)

    produto_id = models.CharField(max_length=60, db_index=True)
    preco = models.DecimalField(max_digits=12, decimal_places=2)

    usuario_alteracao = models.IntegerField(null=True, blank=True)
    nome_usuario = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "produto_preco_log"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.produto_id} -> {self.preco}"

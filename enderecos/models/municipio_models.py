import uuid
from django.db import models
from django.core.validators import MinLengthValidator

from enderecos.models.uf_models import UF
from enderecos.normalizacao import normalizar_nome


class Municipio(models.Model):
    """
    Município conforme tabela IBGE.
    No MDF-e:
      - cMun / cMunEncerramento = código IBGE de 7 dígitos
      - xMun = nome do município
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    nome = models.CharField(
        max_length=60,
        help_text="Nome do município (xMun).",
    )

    # Nome sem acentos e em maiúsculas, usado na resolução por texto livre
    nome_normalizado = models.CharField(
        max_length=60,
        db_index=True,
        editable=False,
    )

    uf = models.ForeignKey(
        UF,
        on_delete=models.PROTECT,
        related_name="municipios",
        help_text="UF do município.",
    )

    codigo_ibge = models.CharField(
        max_length=7,
        unique=True,
        validators=[MinLengthValidator(7)],
        help_text="Código IBGE do município (7 dígitos).",
    )

    class Meta:
        db_table = "enderecos_municipio"
        verbose_name = "Município"
        verbose_name_plural = "Municípios"
        ordering = ["uf__sigla", "nome"]
        constraints = [
            models.UniqueConstraint(
                fields=["nome", "uf"],
                name="uniq_municipio_nome_uf"
            ),
        ]
        indexes = [
            models.Index(fields=["uf"], name="idx_municipio_uf"),
            models.Index(fields=["codigo_ibge"], name="idx_municipio_codigo_ibge"),
        ]

    def __str__(self):
        return f"{self.nome} / {self.uf.sigla}"

    def save(self, *args, **kwargs):
        self.nome_normalizado = normalizar_nome(self.nome)
        super().save(*args, **kwargs)

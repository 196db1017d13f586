import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="UF",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sigla", models.CharField(help_text="Sigla da UF (ex.: SP, RJ, MG).", max_length=2, unique=True)),
                ("nome", models.CharField(help_text="Nome da UF (ex.: São Paulo).", max_length=60, unique=True)),
                (
                    "codigo_ibge",
                    models.CharField(
                        help_text="Código IBGE da UF (2 dígitos).",
                        max_length=2,
                        unique=True,
                        validators=[django.core.validators.MinLengthValidator(2)],
                    ),
                ),
            ],
            options={
                "verbose_name": "UF",
                "verbose_name_plural": "UFs",
                "db_table": "enderecos_uf",
                "ordering": ["nome"],
                "indexes": [models.Index(fields=["codigo_ibge"], name="idx_uf_codigo_ibge")],
            },
        ),
        migrations.CreateModel(
            name="Municipio",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("nome", models.CharField(help_text="Nome do município (xMun).", max_length=60)),
                ("nome_normalizado", models.CharField(db_index=True, editable=False, max_length=60)),
                (
                    "codigo_ibge",
                    models.CharField(
                        help_text="Código IBGE do município (7 dígitos).",
                        max_length=7,
                        unique=True,
                        validators=[django.core.validators.MinLengthValidator(7)],
                    ),
                ),
                (
                    "uf",
                    models.ForeignKey(
                        help_text="UF do município.",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="municipios",
                        to="enderecos.uf",
                    ),
                ),
            ],
            options={
                "verbose_name": "Município",
                "verbose_name_plural": "Municípios",
                "db_table": "enderecos_municipio",
                "ordering": ["uf__sigla", "nome"],
                "indexes": [
                    models.Index(fields=["uf"], name="idx_municipio_uf"),
                    models.Index(fields=["codigo_ibge"], name="idx_municipio_codigo_ibge"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("nome", "uf"), name="uniq_municipio_nome_uf"),
                ],
            },
        ),
    ]

import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("mdfe", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MdfeEmitente",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField(db_index=True)),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("cpfcnpj", models.CharField(max_length=14)),
                ("razao_social", models.CharField(max_length=60)),
                ("fantasia", models.CharField(blank=True, default="", max_length=60)),
                ("ie", models.CharField(blank=True, default="", max_length=14)),
                ("logradouro", models.CharField(blank=True, default="", max_length=60)),
                ("numero", models.CharField(blank=True, default="", max_length=60)),
                ("complemento", models.CharField(blank=True, default="", max_length=60)),
                ("bairro", models.CharField(blank=True, default="", max_length=60)),
                ("nome_municipio", models.CharField(blank=True, default="", max_length=60)),
                ("codigo_municipio", models.IntegerField(blank=True, null=True)),
                ("uf", models.CharField(max_length=2)),
                ("cep", models.CharField(blank=True, default="", max_length=8)),
                ("telefone", models.CharField(blank=True, default="", max_length=20)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "mdfe_emitente",
                "ordering": ["razao_social"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("id_tenant", "cpfcnpj"),
                        name="uniq_mdfe_emitente_tenant_cpfcnpj",
                    ),
                ],
            },
        ),
    ]

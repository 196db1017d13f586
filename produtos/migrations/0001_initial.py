import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProdutoPrecoLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField(db_index=True)),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("produto_id", models.CharField(db_index=True, max_length=60)),
                ("preco", models.DecimalField(decimal_places=2, max_digits=12)),
                ("usuario_alteracao", models.IntegerField(blank=True, null=True)),
                ("nome_usuario", models.CharField(blank=True, default="", max_length=150)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "produto_preco_log",
                "ordering": ["-created_at"],
            },
        ),
    ]

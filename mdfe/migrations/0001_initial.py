import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MdfeDocumento",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField(db_index=True)),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pendente", "Pendente"),
                            ("autorizado", "Autorizado"),
                            ("rejeitado", "Rejeitado"),
                            ("denegado", "Denegado"),
                            ("encerrado", "Encerrado"),
                            ("cancelado", "Cancelado"),
                            ("erro", "Erro"),
                        ],
                        default="pendente",
                        max_length=16,
                    ),
                ),
                ("ide", models.JSONField(blank=True, default=dict)),
                ("emit", models.JSONField(blank=True, default=dict)),
                ("inf_modal", models.JSONField(blank=True, default=dict)),
                ("inf_doc", models.JSONField(blank=True, default=dict)),
                ("tot", models.JSONField(blank=True, default=dict)),
                ("inf_adic", models.JSONField(blank=True, default=dict)),
                ("chave", models.CharField(blank=True, max_length=44, null=True)),
                ("protocolo", models.CharField(blank=True, max_length=64, null=True)),
                ("data_hora_autorizacao", models.DateTimeField(blank=True, null=True)),
                ("mensagem_sefaz", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "mdfe_documento",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["id_tenant", "id_empresa"], name="idx_mdfe_doc_tenant_emp"),
                    models.Index(fields=["id_tenant", "status"], name="idx_mdfe_doc_tenant_status"),
                    models.Index(fields=["chave"], name="idx_mdfe_doc_chave"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MdfeEvento",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField()),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("user_id", models.BigIntegerField(blank=True, null=True)),
                ("chave", models.CharField(blank=True, max_length=44, null=True)),
                ("tp_evento", models.CharField(blank=True, default="", max_length=6)),
                ("tipo_evento", models.CharField(max_length=20)),
                ("n_seq_evento", models.PositiveSmallIntegerField(default=1)),
                ("protocolo", models.CharField(blank=True, max_length=64, null=True)),
                ("c_stat", models.IntegerField(blank=True, null=True)),
                ("x_motivo", models.TextField(blank=True, null=True)),
                ("dh_evento", models.DateTimeField(default=django.utils.timezone.now)),
                ("aceito", models.BooleanField(default=False)),
                ("xml", models.TextField(blank=True, null=True)),
                ("pdf_base64", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "documento",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="eventos",
                        to="mdfe.mdfedocumento",
                    ),
                ),
            ],
            options={
                "db_table": "mdfe_evento",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["documento", "tipo_evento"], name="idx_mdfe_evt_doc_tipo"),
                    models.Index(fields=["id_tenant", "chave"], name="idx_mdfe_evt_tenant_chave"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MdfeRetorno",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField()),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("user_id", models.BigIntegerField(blank=True, null=True)),
                ("tipo_operacao", models.CharField(max_length=20)),
                ("http_status", models.IntegerField(blank=True, null=True)),
                ("payload_enviado", models.JSONField(blank=True, null=True)),
                ("resposta", models.JSONField(blank=True, null=True)),
                ("c_stat", models.IntegerField(blank=True, null=True)),
                ("x_motivo", models.TextField(blank=True, null=True)),
                ("protocolo", models.CharField(blank=True, max_length=64, null=True)),
                ("chave", models.CharField(blank=True, max_length=44, null=True)),
                ("data_processamento", models.CharField(blank=True, max_length=40, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "documento",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="retornos",
                        to="mdfe.mdfedocumento",
                    ),
                ),
            ],
            options={
                "db_table": "mdfe_retorno",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["documento", "tipo_operacao"], name="idx_mdfe_ret_doc_tipo"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MdfeArquivo",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField()),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("chave", models.CharField(max_length=44)),
                ("xml", models.TextField(blank=True, null=True)),
                ("pdf_base64", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "documento",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="arquivos",
                        to="mdfe.mdfedocumento",
                    ),
                ),
            ],
            options={
                "db_table": "mdfe_arquivo",
                "constraints": [
                    models.UniqueConstraint(fields=("id_tenant", "chave"), name="uniq_mdfe_arquivo_tenant_chave"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MdfeCertificado",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField()),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("cpfcnpj", models.CharField(max_length=14)),
                ("arquivo_pfx", models.BinaryField()),
                ("senha", models.CharField(max_length=128)),
                ("validade", models.DateTimeField()),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "mdfe_certificado",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("id_tenant", "id_empresa"),
                        name="uniq_mdfe_certificado_tenant_empresa",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MdfeNumeracao",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("id_tenant", models.IntegerField()),
                ("id_empresa", models.IntegerField(blank=True, null=True)),
                ("serie", models.PositiveIntegerField(default=1)),
                ("numero_atual", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "mdfe_numeracao",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("id_tenant", "id_empresa", "serie"),
                        name="uniq_mdfe_numeracao_tenant_emp_serie",
                    ),
                ],
            },
        ),
    ]

import uuid

from django.db import models
from django.utils import timezone


class MdfeStatus(models.TextChoices):
    PENDENTE = "pendente", "Pendente"
    AUTORIZADO = "autorizado", "Autorizado"
    REJEITADO = "rejeitado", "Rejeitado"
    DENEGADO = "denegado", "Denegado"
    ENCERRADO = "encerrado", "Encerrado"
    CANCELADO = "cancelado", "Cancelado"
    ERRO = "erro", "Erro"


class RegistroImutavelError(Exception):
    """
    Tentativa de alterar ou apagar um registro de auditoria (evento MDF-e).
    """


class MdfeDocumento(models.Model):
    """
    Manifesto eletrônico (MDF-e) de um tenant/empresa.

    As seções fiscais (ide, emit, infModal, infDoc, tot, infAdic) ficam em JSON,
    no mesmo formato camelCase enviado ao gateway; a validação por seção é feita
    em mdfe.serializers_documento antes de qualquer envio.

    Depois de autorizado, o documento é identificado pela chave de acesso
    (44 dígitos) e pelo protocolo de autorização.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    id_tenant = models.IntegerField(db_index=True)
    id_empresa = models.IntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=MdfeStatus.choices,
        default=MdfeStatus.PENDENTE,
    )

    ide = models.JSONField(default=dict, blank=True)
    emit = models.JSONField(default=dict, blank=True)
    inf_modal = models.JSONField(default=dict, blank=True)
    inf_doc = models.JSONField(default=dict, blank=True)
    tot = models.JSONField(default=dict, blank=True)
    inf_adic = models.JSONField(default=dict, blank=True)

    # Preenchidos pelo retorno da autorização
    chave = models.CharField(max_length=44, null=True, blank=True)
    protocolo = models.CharField(max_length=64, null=True, blank=True)
    data_hora_autorizacao = models.DateTimeField(null=True, blank=True)

    # Último retorno da SEFAZ (human-readable)
    mensagem_sefaz = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "mdfe_documento"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["id_tenant", "id_empresa"], name="idx_mdfe_doc_tenant_emp"),
            models.Index(fields=["id_tenant", "status"], name="idx_mdfe_doc_tenant_status"),
            models.Index(fields=["chave"], name="idx_mdfe_doc_chave"),
        ]

    def __str__(self):
        return f"MDF-e {self.id} - {self.chave or 'sem chave'} ({self.status})"

    @property
    def cnpj_emitente(self):
        valor = (self.emit or {}).get("CNPJ") or (self.emit or {}).get("CPF")
        return str(valor).strip() if valor else None

    @property
    def uf_codigo(self):
        """
        cUF do documento (ide.cUF), com fallback para os 2 primeiros dígitos da chave.
        """
        cuf = (self.ide or {}).get("cUF")
        if cuf:
            return str(cuf)
        if self.chave:
            return self.chave[:2]
        return None


class MdfeEvento(models.Model):
    """
    Evento fiscal de um MDF-e (autorização, cancelamento, encerramento).

    Append-only: cada tentativa de evento gera um registro novo, aceito ou não.
    O registro nunca é alterado nem apagado depois de gravado.

    tp_evento segue o código fiscal:
      - 110111 cancelamento
      - 110112 encerramento
      - vazio para a própria autorização do manifesto
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    documento = models.ForeignKey(
        MdfeDocumento,
        on_delete=models.PROTECT,
        related_name="eventos",
    )

    id_tenant = models.IntegerField()
    id_empresa = models.IntegerField(null=True, blank=True)
    user_id = models.BigIntegerField(null=True, blank=True)

    chave = models.CharField(max_length=44, null=True, blank=True)
    tp_evento = models.CharField(max_length=6, blank=True, default="")
    tipo_evento = models.CharField(max_length=20)
    n_seq_evento = models.PositiveSmallIntegerField(default=1)

    protocolo = models.CharField(max_length=64, null=True, blank=True)
    c_stat = models.IntegerField(null=True, blank=True)
    x_motivo = models.TextField(null=True, blank=True)
    dh_evento = models.DateTimeField(default=timezone.now)
    aceito = models.BooleanField(default=False)

    xml = models.TextField(null=True, blank=True)
    pdf_base64 = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "mdfe_evento"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["documento", "tipo_evento"], name="idx_mdfe_evt_doc_tipo"),
            models.Index(fields=["id_tenant", "chave"], name="idx_mdfe_evt_tenant_chave"),
        ]

    def __str__(self):
        return f"Evento {self.tipo_evento} #{self.n_seq_evento} ({self.c_stat})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RegistroImutavelError("Evento MDF-e não pode ser alterado após gravado.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RegistroImutavelError("Evento MDF-e não pode ser apagado.")


class MdfeRetorno(models.Model):
    """
    Captura bruta de cada chamada ao gateway SEFAZ (payload enviado + resposta).
    Só para auditoria/troubleshooting; nenhuma regra de negócio lê esta tabela.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    documento = models.ForeignKey(
        MdfeDocumento,
        on_delete=models.PROTECT,
        related_name="retornos",
    )

    id_tenant = models.IntegerField()
    id_empresa = models.IntegerField(null=True, blank=True)
    user_id = models.BigIntegerField(null=True, blank=True)

    tipo_operacao = models.CharField(max_length=20)
    http_status = models.IntegerField(null=True, blank=True)

    payload_enviado = models.JSONField(null=True, blank=True)
    resposta = models.JSONField(null=True, blank=True)

    c_stat = models.IntegerField(null=True, blank=True)
    x_motivo = models.TextField(null=True, blank=True)
    protocolo = models.CharField(max_length=64, null=True, blank=True)
    chave = models.CharField(max_length=44, null=True, blank=True)
    data_processamento = models.CharField(max_length=40, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "mdfe_retorno"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["documento", "tipo_operacao"], name="idx_mdfe_ret_doc_tipo"),
        ]

    def __str__(self):
        return f"Retorno {self.tipo_operacao} HTTP {self.http_status} ({self.c_stat})"


class MdfeArquivo(models.Model):
    """
    Último XML / DANFE (PDF em base64) recebido para uma chave de MDF-e.
    Um registro por (tenant, chave), atualizado a cada retorno que traga arquivos.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    documento = models.ForeignKey(
        MdfeDocumento,
        on_delete=models.PROTECT,
        related_name="arquivos",
    )

    id_tenant = models.IntegerField()
    id_empresa = models.IntegerField(null=True, blank=True)
    chave = models.CharField(max_length=44)

    xml = models.TextField(null=True, blank=True)
    pdf_base64 = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "mdfe_arquivo"
        constraints = [
            models.UniqueConstraint(fields=["id_tenant", "chave"], name="uniq_mdfe_arquivo_tenant_chave"),
        ]

    def __str__(self):
        return f"Arquivos MDF-e {self.chave}"

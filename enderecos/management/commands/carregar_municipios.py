import json
from contextlib import nullcontext
from typing import Any, Dict, Iterable, Optional, Tuple

import requests
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from enderecos.constants import UF_CODIGOS_IBGE
from enderecos.models import UF, Municipio
from enderecos.normalizacao import normalizar_nome


IBGE_MUNICIPIOS_URL_PADRAO = (
    "https://servicodados.ibge.gov.br/api/v1/localidades/municipios"
)


def _extrair_uf(item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Localiza o bloco UF de um município do JSON do IBGE.

    O caminho clássico é microrregiao.mesorregiao.UF; municípios criados
    recentemente podem vir sem microrregião, e aí usamos
    regiao-imediata.regiao-intermediaria.UF.
    """
    micro = item.get("microrregiao") or {}
    uf = (micro.get("mesorregiao") or {}).get("UF")
    if uf:
        return uf

    imediata = item.get("regiao-imediata") or {}
    return (imediata.get("regiao-intermediaria") or {}).get("UF")


def _extrair_municipios(payload: Any) -> Iterable[Tuple[str, str, str, str]]:
    """
    Converte o JSON do IBGE em tuplas (codigo_ibge, nome, uf_sigla, uf_nome).
    """
    if not isinstance(payload, list):
        raise CommandError("JSON do IBGE inesperado: era esperada uma lista de municípios.")

    for item in payload:
        uf = _extrair_uf(item)
        if not uf or not item.get("id") or not item.get("nome"):
            continue
        yield str(item["id"]), item["nome"], uf["sigla"], uf.get("nome") or uf["sigla"]


class Command(BaseCommand):
    help = (
        "Carrega/atualiza a tabela de UFs e municípios a partir da API pública "
        "de localidades do IBGE."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--url",
            type=str,
            default=IBGE_MUNICIPIOS_URL_PADRAO,
            help="URL do JSON de municípios (default = API de localidades do IBGE).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Simula a execução sem gravar no banco.",
        )

    def handle(self, *args, **options):
        url = options["url"]
        dry_run = options["dry_run"]

        self.stdout.write(self.style.NOTICE(f"[carregar_municipios] Baixando JSON de: {url}"))

        try:
            resp = requests.get(url, timeout=60)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise CommandError(f"Erro ao requisitar JSON de municípios: {exc}") from exc

        try:
            payload = resp.json()
        except json.JSONDecodeError as exc:
            raise CommandError(f"Resposta não é um JSON válido: {exc}") from exc

        itens = list(_extrair_municipios(payload))

        self.stdout.write(
            self.style.NOTICE(
                f"[carregar_municipios] Iniciando processamento de {len(itens)} municípios."
            )
        )

        criados = 0
        atualizados = 0
        ufs_cache: Dict[str, UF] = {}

        ctx = nullcontext() if dry_run else transaction.atomic()
        with ctx:
            for codigo_ibge, nome, uf_sigla, uf_nome in itens:
                if dry_run:
                    criados += 1
                    continue

                uf = ufs_cache.get(uf_sigla)
                if uf is None:
                    uf, _ = UF.objects.update_or_create(
                        sigla=uf_sigla,
                        defaults={
                            "nome": uf_nome,
                            "codigo_ibge": UF_CODIGOS_IBGE.get(uf_sigla, codigo_ibge[:2]),
                        },
                    )
                    ufs_cache[uf_sigla] = uf

                _, created = Municipio.objects.update_or_create(
                    codigo_ibge=codigo_ibge,
                    defaults={
                        "nome": nome,
                        "nome_normalizado": normalizar_nome(nome),
                        "uf": uf,
                    },
                )
                if created:
                    criados += 1
                else:
                    atualizados += 1

        sufixo = " (dry-run, nada foi gravado)" if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(
                f"[carregar_municipios] Criados: {criados} | Atualizados: {atualizados}{sufixo}"
            )
        )

# enderecos/services/municipio_service.py
"""
Resolução de município (texto livre) para código IBGE.

Usado pelo encerramento de MDF-e: o usuário informa UF + nome do município
e o evento precisa do cMunEncerramento numérico.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from enderecos.constants import UF_CODIGOS_IBGE
from enderecos.models import Municipio
from enderecos.normalizacao import normalizar_nome

logger = logging.getLogger("mdfe.sefaz")


@dataclass(frozen=True)
class MunicipioResolvido:
    codigo_ibge: int
    nome: str
    uf: str


class MunicipioLookupProtocol(Protocol):
    """
    Contrato do colaborador de busca de municípios.
    """

    def resolver(self, uf: str, nome: str) -> Optional[MunicipioResolvido]:
        ...


def codigo_uf(uf: str | None) -> Optional[str]:
    """
    Converte sigla de UF ('SP') para o código IBGE ('35').
    Retorna None para UF desconhecida.
    """
    if not uf:
        return None
    return UF_CODIGOS_IBGE.get(uf.strip().upper())


class MunicipioOrmLookup:
    """
    Implementação padrão, sobre a tabela enderecos_municipio.

    A comparação é feita pelo nome normalizado (sem acentos, maiúsculas),
    então "sao paulo", "São Paulo" e "SAO  PAULO" resolvem para o mesmo código.
    """

    def resolver(self, uf: str, nome: str) -> Optional[MunicipioResolvido]:
        sigla = (uf or "").strip().upper()
        nome_normalizado = normalizar_nome(nome)

        if not sigla or not nome_normalizado:
            return None

        municipio = (
            Municipio.objects.select_related("uf")
            .filter(uf__sigla=sigla, nome_normalizado=nome_normalizado)
            .first()
        )
        if municipio is None:
            logger.info(
                "municipio_nao_resolvido",
                extra={"event": "municipio_lookup", "uf": sigla, "nome": nome},
            )
            return None

        return MunicipioResolvido(
            codigo_ibge=int(municipio.codigo_ibge),
            nome=municipio.nome,
            uf=municipio.uf.sigla,
        )

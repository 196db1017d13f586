# mdfe/services/emitente_service.py

import logging
from typing import Optional

from enderecos.services.municipio_service import MunicipioLookupProtocol, MunicipioOrmLookup
from mdfe.models import MdfeEmitente
from usuario.contexto import ContextoTenant

logger = logging.getLogger("mdfe.sefaz")


def emitentes_do_tenant(contexto: ContextoTenant):
    return MdfeEmitente.objects.filter(id_tenant=contexto.id_tenant)


def emitente_da_empresa(contexto: ContextoTenant) -> Optional[MdfeEmitente]:
    if contexto.id_empresa is None:
        return None
    return emitentes_do_tenant(contexto).filter(id_empresa=contexto.id_empresa).first()


def resolver_codigo_municipio(
    uf: str,
    nome_municipio: str,
    lookup: Optional[MunicipioLookupProtocol] = None,
) -> Optional[int]:
    """
    Código IBGE do município do emitente; None quando UF + nome não resolvem.
    """
    if not nome_municipio:
        return None

    lookup = lookup or MunicipioOrmLookup()
    municipio = lookup.resolver(uf, nome_municipio)
    if municipio is None:
        logger.info(
            "mdfe_emitente_municipio_nao_resolvido",
            extra={"event": "mdfe_emitente", "uf": uf, "municipio": nome_municipio},
        )
        return None
    return municipio.codigo_ibge

from .mdfe_models import (
    MdfeArquivo,
    MdfeDocumento,
    MdfeEvento,
    MdfeRetorno,
    MdfeStatus,
    RegistroImutavelError,
)
from .certificado_models import MdfeCertificado
from .emitente_models import MdfeEmitente
from .numeracao_models import MdfeNumeracao


__all__ = [
    "MdfeArquivo",
    "MdfeDocumento",
    "MdfeEvento",
    "MdfeRetorno",
    "MdfeStatus",
    "RegistroImutavelError",
    "MdfeCertificado",
    "MdfeEmitente",
    "MdfeNumeracao",
]

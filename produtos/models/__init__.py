# produtos/models/__init__.py

from .preco_log_models import ProdutoPrecoLog

__all__ = [
    "ProdutoPrecoLog",
]

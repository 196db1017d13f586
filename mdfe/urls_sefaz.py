# mdfe/urls_sefaz.py
from django.urls import path

from mdfe.views.sefaz_views import (
    cancelamento_view,
    encerramento_view,
    envio_view,
    nao_encerrados_view,
    status_view,
)

urlpatterns = [
    path("envio", envio_view, name="envio"),
    path("cancelamento", cancelamento_view, name="cancelamento"),
    path("encerramento", encerramento_view, name="encerramento"),
    path("status", status_view, name="status"),
    path("nao-encerrados", nao_encerrados_view, name="nao-encerrados"),
]

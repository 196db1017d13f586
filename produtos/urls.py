# produtos/urls.py

from django.urls import path

from produtos.views.preco_views import atualizar_precos_view, historico_precos_view

urlpatterns = [
    path("precos/atualizar/", atualizar_precos_view, name="precos-atualizar"),
    path("precos/historico/", historico_precos_view, name="precos-historico"),
]

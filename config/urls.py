# config/urls.py
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("", include("commons.urls")),
    path("api/v1/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/v1/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/v1/endereco/", include(("enderecos.urls", "enderecos"), namespace="enderecos")),
    path("api/v1/mdfe/", include(("mdfe.urls", "mdfe"), namespace="mdfe")),
    path("api/v1/produtos/", include(("produtos.urls", "produtos"), namespace="produtos")),
    path("api/sefaz/", include(("mdfe.urls_sefaz", "sefaz"), namespace="sefaz")),
    path("api/v1/schema/", SpectacularAPIView.as_view(), name="schema"),
]

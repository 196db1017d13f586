# mdfe/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from mdfe.views.certificado_views import certificado_view
from mdfe.views.documento_views import MdfeDocumentoViewSet
from mdfe.views.emitente_views import MdfeEmitenteViewSet

router = DefaultRouter()
router.register(r"documentos", MdfeDocumentoViewSet, basename="documento")
router.register(r"emitentes", MdfeEmitenteViewSet, basename="emitente")

urlpatterns = [
    path("certificado/", certificado_view, name="certificado"),
    path("", include(router.urls)),
]

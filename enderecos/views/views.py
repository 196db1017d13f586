from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend

from enderecos.models.uf_models import UF
from enderecos.models.municipio_models import Municipio

from enderecos.serializers import UFSerializer, MunicipioSerializer


class UFViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = UF.objects.all()
    serializer_class = UFSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ['nome', 'sigla']


class MunicipioViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Municipio.objects.select_related('uf').all()
    serializer_class = MunicipioSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['uf__sigla'] # combos do formulário de encerramento
    search_fields = ['nome', 'codigo_ibge']

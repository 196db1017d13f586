from rest_framework import serializers

from enderecos.models.uf_models import UF
from enderecos.models.municipio_models import Municipio


class UFSerializer(serializers.ModelSerializer):
    class Meta:
        model = UF
        fields = ['id', 'sigla', 'nome', 'codigo_ibge']


class MunicipioSerializer(serializers.ModelSerializer):
    uf_sigla = serializers.ReadOnlyField(source='uf.sigla')

    class Meta:
        model = Municipio
        fields = ['id', 'nome', 'codigo_ibge', 'uf', 'uf_sigla']

from rest_framework import serializers

from produtos.models import ProdutoPrecoLog


class PrecoItemSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=60)
    preco = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class HistoricoPrecoQuerySerializer(serializers.Serializer):
    codigo = serializers.CharField(max_length=60)


class ProdutoPrecoLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProdutoPrecoLog
        fields = [
            "id",
            "produto_id",
            "preco",
            "usuario_alteracao",
            "nome_usuario",
            "id_empresa",
            "created_at",
        ]
        read_only_fields = fields

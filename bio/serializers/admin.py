from rest_framework import serializers


class PageQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=200, required=False, default=50)
    offset = serializers.IntegerField(min_value=0, required=False, default=0)


class GenerateKeysSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1, max_value=100, required=False, default=1)

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, viewsets

from users.permissions import HasCapability


class POSViewSet(viewsets.GenericViewSet):
    """
    Base ViewSet for the POS API.

    Features:
    - Authentication plus the role capability check on every action
    - Standard filtering, search and ordering backends
    - ``validated()`` helper for input serializers

    Usage:
        class CategoryViewSet(POSViewSet):
            capability_map = {"list": "menu.read", "create": "menu.manage"}
    """

    permission_classes = [permissions.IsAuthenticated, HasCapability]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    capability_map = {}

    def validated(self, serializer_class, data=None, **kwargs):
        serializer = serializer_class(
            data=self.request.data if data is None else data,
            context=self.get_serializer_context(),
            **kwargs,
        )
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

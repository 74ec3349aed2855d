from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.purchases.api.v1.views import PurchaseViewSet

router = DefaultRouter()
router.register(r'purchases', PurchaseViewSet, basename='purchase')

urlpatterns = [
    path('', include(router.urls)),
]

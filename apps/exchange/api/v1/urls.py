from django.urls import path

from apps.exchange.api.v1.views import RateSourceHealthView

urlpatterns = [
    path('rate-source/', RateSourceHealthView.as_view(), name='rate-source-health'),
]

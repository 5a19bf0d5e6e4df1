from django.urls import path

from .consumers import BulletinExportMetricsConsumer

websocket_urlpatterns = [
    path("ws/bulletins/metrics/", BulletinExportMetricsConsumer.as_asgi()),
]

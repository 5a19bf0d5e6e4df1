from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, re_path
from django.views.static import serve

from bulletins.api import (
    BulletinHistoryView,
    BulletinHtmlView,
    CreateBulletinPdfView,
    DownloadExportView,
    GenerateBulletinsView,
    PdfTemplateView,
    ResetMetricsView,
    StreamBulletinPdfView,
)
from schools.api import (
    EvaluationTypeDetailView,
    EvaluationTypeListView,
    GradingPeriodDetailView,
    GradingPeriodListView,
    GradingSystemView,
)


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/admin/bulletins/generate/", GenerateBulletinsView.as_view(), name="generate-bulletins"),
    path("api/admin/bulletins/", BulletinHistoryView.as_view(), name="bulletin-history"),
    path("api/admin/bulletins/<int:pk>/html/", BulletinHtmlView.as_view(), name="bulletin-html"),
    path("api/admin/bulletins/<int:pk>/pdf/", CreateBulletinPdfView.as_view(), name="bulletin-pdf"),
    path("api/admin/bulletins/<int:pk>/pdf/stream/", StreamBulletinPdfView.as_view(), name="bulletin-pdf-stream"),
    path(
        "api/admin/bulletin-exports/<int:pk>/download/", DownloadExportView.as_view(), name="bulletin-export-download"
    ),
    path("api/admin/pdf-templates/", PdfTemplateView.as_view(), name="pdf-template"),
    path("api/admin/grading/evaluation-types/", EvaluationTypeListView.as_view(), name="evaluation-types"),
    path(
        "api/admin/grading/evaluation-types/<int:pk>/",
        EvaluationTypeDetailView.as_view(),
        name="evaluation-type-detail",
    ),
    path("api/admin/grading/periods/", GradingPeriodListView.as_view(), name="grading-periods"),
    path("api/admin/grading/periods/<int:pk>/", GradingPeriodDetailView.as_view(), name="grading-period-detail"),
    path("api/admin/grading/system/", GradingSystemView.as_view(), name="grading-system"),
    path("api/metrics/reset/", ResetMetricsView.as_view(), name="reset-metrics"),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# Sert les PDF locaux même avec DEBUG=False en dev.
if not settings.DEBUG and settings.MEDIA_URL and settings.MEDIA_ROOT:
    urlpatterns += [
        re_path(r"^%s(?P<path>.*)$" % settings.MEDIA_URL.lstrip("/"), serve, {"document_root": settings.MEDIA_ROOT}),
    ]

from django.urls import path

from .views import (
    PendingStaffCallListView,
    StaffCallDetailView,
    StaffCallListCreateView,
    TableStaffCallListView,
)

urlpatterns = [

    path("staff-calls", StaffCallListCreateView.as_view(), name="staff-call-list-create"),
    path("staff-calls/pending", PendingStaffCallListView.as_view(), name="staff-call-pending"),
    path(
        "staff-calls/table/<str:table_number>",
        TableStaffCallListView.as_view(),
        name="staff-call-table-list"
    ),
    path("staff-calls/<int:pk>", StaffCallDetailView.as_view(), name="staff-call-detail"),
]

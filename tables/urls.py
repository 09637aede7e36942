from django.urls import path

from .views import TableByNumberView, TableDetailView, TableListCreateView

urlpatterns = [

    path("tables", TableListCreateView.as_view(), name="table-list-create"),

    path(
        "tables/number/<str:table_number>",
        TableByNumberView.as_view(),
        name="table-by-number"
    ),

    path("tables/<int:pk>", TableDetailView.as_view(), name="table-detail"),
]

from django.urls import include, path

urlpatterns = [
    path('', include('automaton_lab.urls')),
]

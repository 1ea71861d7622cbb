from django.urls import path
from . import views

urlpatterns = [
    # CRUD over the automaton store
    path('api/automata/', views.automata_collection, name='automata_collection'),
    path('api/automata/import/', views.import_view, name='import_automaton'),
    path('api/automata/<str:automaton_id>/', views.automaton_detail, name='automaton_detail'),
    path('api/automata/<str:automaton_id>/export/', views.export_view, name='export_automaton'),

    # Run a stored automaton, or one posted with the request
    path('api/automata/<str:automaton_id>/simulate/', views.simulate_stored, name='simulate_stored'),
    path('api/simulate/', views.simulate, name='simulate'),

    # Property checking
    path('api/check-properties/', views.check_properties, name='check_properties'),
]

from django.apps import AppConfig


class AutomatonLabConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'automaton_lab'
    verbose_name = 'Automaton Lab'

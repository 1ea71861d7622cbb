from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULTS = {
    # Delay between auto-play steps, in milliseconds
    'AUTOPLAY_DELAY_MS': 500,
    'DEFAULT_AUTOMATON_NAME': 'Untitled Automaton',
    # Longest input accepted by the simulation endpoints
    'MAX_INPUT_LENGTH': 10000,
}


def get_setting(name: str):
    """
    Read an app setting from the AUTOMATON_LAB dict in the Django settings,
    falling back to the defaults above. Outside a configured Django project
    the defaults apply.
    """
    if name not in DEFAULTS:
        raise KeyError(f'Unknown automaton lab setting: {name}')
    try:
        overrides = getattr(settings, 'AUTOMATON_LAB', {})
    except ImproperlyConfigured:
        overrides = {}
    return overrides.get(name, DEFAULTS[name])

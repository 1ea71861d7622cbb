import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'automaton-lab-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.staticfiles',
    'automaton_lab.apps.AutomatonLabConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
]

ROOT_URLCONF = 'labsite.urls'

WSGI_APPLICATION = 'labsite.wsgi.application'

# The automaton store is in memory; the database only satisfies the test runner
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

USE_TZ = True

STATIC_URL = 'static/'

AUTOMATON_LAB = {
    'AUTOPLAY_DELAY_MS': int(os.environ.get('AUTOMATON_LAB_AUTOPLAY_DELAY_MS', 500)),
    'DEFAULT_AUTOMATON_NAME': 'Untitled Automaton',
    'MAX_INPUT_LENGTH': 10000,
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'automaton_lab': {
            'handlers': ['console'],
            'level': os.environ.get('AUTOMATON_LAB_LOG_LEVEL', 'INFO'),
        },
    },
}

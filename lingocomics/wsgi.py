"""WSGI entrypoint: ``gunicorn lingocomics.wsgi:app``."""
from lingocomics.startup.wiring import create_app

app = create_app()

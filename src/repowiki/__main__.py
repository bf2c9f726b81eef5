"""Allow ``python -m repowiki``."""

from .cli import app

app()

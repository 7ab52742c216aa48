"""ASGI entrypoint for the EA client API."""

from ea_client.api.app import create_app
from ea_client.containers import build_container

app = create_app(build_container())

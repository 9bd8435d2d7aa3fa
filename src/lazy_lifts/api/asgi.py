"""ASGI entrypoint for the Lazy Lifts API."""

from lazy_lifts.api.app import create_app
from lazy_lifts.containers import build_container

app = create_app(build_container())

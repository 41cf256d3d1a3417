"""ASGI entrypoint for the H2O Tender API."""

from h2o_tender.api.app import create_app
from h2o_tender.containers import build_container

app = create_app(build_container())

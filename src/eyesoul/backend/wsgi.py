"""WSGI entrypoint for deploying the Eyesoul client-state backend."""

import atexit

from eyesoul.backend.app import create_app
from eyesoul.backend.app.routes.collections import REGISTRY_EXTENSION

application = create_app()

# Write debounced changes that are still pending when the worker exits.
atexit.register(application.extensions[REGISTRY_EXTENSION].close)

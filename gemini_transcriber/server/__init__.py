"""Web front-end: FastAPI app, session registry, and HTML rendering."""

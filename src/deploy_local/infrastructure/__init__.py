"""Infrastructure layer: executors, identity lookup, template loading.

This layer depends on stdlib and third-party libs (Jinja2).
It must never import from services, commands, or output.
"""

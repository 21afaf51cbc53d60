"""
Feature modules live under this package.

Each module owns its routes and models, and reuses the platform
primitives (config, DB session) from `app.customer_service`.
"""

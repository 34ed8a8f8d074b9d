"""
Patient details: models, schemas, service and routes.
"""

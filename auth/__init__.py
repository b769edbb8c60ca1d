"""auth/ -- Identity, credentials, and the session-based access pipeline.

Layer rule: auth/ imports only core/, store/base.py + third-party libraries.
It does NOT import from api/ or content/.
api/ imports from auth/, not the other way around.
"""

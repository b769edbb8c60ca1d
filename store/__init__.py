"""store/ -- Persistence adapters consumed by the models.

Layer rule: store/ imports only core/ + third-party libraries.
It does NOT import from api/, auth/, or content/. Models receive a store
handle at construction; nothing in this package is a process-wide global.
"""

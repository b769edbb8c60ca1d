"""content/ -- Comment records and the model that owns them.

Layer rule: content/ imports only core/, store/base.py + third-party libraries.
It does NOT import from auth/ or api/. Authors are opaque references; joining
comments to users is the caller's job.
"""

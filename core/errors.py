"""
core/errors.py -- Error taxonomy shared by the models and the store adapter.

Models raise these; they never raise HTTP errors. api/main.py owns the
translation table from these classes to status codes.

Layer rule: core/ is the kernel. No imports from api/, auth/, content/, store/.
"""


class ModelError(Exception):
    """Base class for every error a model or DataStore adapter can raise."""


class ValidationError(ModelError):
    """Malformed or missing input to a model call."""


class NotFoundError(ModelError):
    """A lookup by identifier matched no record."""


class DuplicateError(ModelError):
    """A write would violate a uniqueness rule enforced by the store."""


class PersistenceError(ModelError):
    """The underlying store failed (connection, driver, or schema error)."""

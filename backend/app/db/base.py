"""
Model registry.

Import every model so they are registered with Base before metadata is
used (create_all in the app lifespan, the batch scripts and the tests).
"""

from backend.app.db.session import Base  # noqa: F401
from backend.app.models.member import Member  # noqa: F401
from backend.app.models.dependent import Dependent  # noqa: F401
from backend.app.models.transaction import Transaction  # noqa: F401
from backend.app.models.ledger_entry import LedgerEntry  # noqa: F401
from backend.app.models.audit_log import AuditLog  # noqa: F401

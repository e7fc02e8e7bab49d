"""
Module: resale_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/base.py,
    models/ and domain/records.py.  MUST NOT import from services/ or outer
    layers.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller and
      never call session.add(), session.delete(), session.commit(), or
      session.flush().
    - DTO return convention: selectors return the frozen record snapshots
      from resale_kernel.domain.records, NOT ORM model instances.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from resale_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Guarantees:
        - session is stored as a public attribute for subclass query use.
        - No commit, flush, add, or delete operations are performed.
    """

    def __init__(self, session: Session):
        self.session = session

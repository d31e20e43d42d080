"""
Internal Types
Enums and dataclasses for client-internal data structures
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass, field


# ==================== Client Enums ====================

class UpdateResult(Enum):
    """Outcome of a license update that did not raise"""
    SUCCESS = "SUCCESS"
    NO_CHANGE = "NO_CHANGE"


class AckStatus(Enum):
    """Classification of an upstream acknowledgment"""
    SUCCESS = "success"
    NO_CHANGE = "no_change"
    ERROR = "error"


# ==================== Dataclasses ====================

@dataclass(frozen=True)
class Session:
    """
    Authenticated portal session

    Held in memory only. A new one is produced by every authenticate() call;
    nothing tracks expiry.
    """
    session_cookie: str = field(repr=False)
    csrf_token: str = field(repr=False)
    account_id: str = ''


@dataclass(frozen=True)
class Acknowledgment:
    """Classified upstream response to a mutating request"""
    status: AckStatus
    message: str = ''
    status_code: Optional[int] = None
    forced: bool = False

    @property
    def is_error(self) -> bool:
        return self.status is AckStatus.ERROR

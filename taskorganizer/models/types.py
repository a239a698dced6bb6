# taskorganizer type definitions
# Rev 0.1.0

from __future__ import annotations
from typing import Literal

Priority = Literal["low", "medium", "high"]
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_PRIORITY: Priority = "medium"

# Audit rows are only produced for task mutations
AuditAction = Literal["INSERT", "COMPLETE", "DELETE"]

# connecting → connected | error; error → connecting on retry
DbState = Literal["connecting", "connected", "error"]

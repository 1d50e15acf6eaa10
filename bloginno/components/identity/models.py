from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bloginno.domain.entities import Principal


@dataclass(frozen=True)
class IdentitySession:
    principal: Principal
    started_at: datetime
    expires_at: datetime

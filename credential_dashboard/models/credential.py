from __future__ import annotations

import datetime
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """An issued credential as the data source reports it.

    institution_id is the issuing institution's identifier (for on-chain
    credentials, the issuer address).  None or "" means "unknown issuer"
    and is excluded from institution counts.
    """

    id: str
    issued_at: datetime.datetime
    institution_id: str | None = None
    revoked: bool = False

"""Client for the renewable-certification registry."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import field_validator

from energy_oracle.data_sources.base import FetchResult, HttpSourceClient, UpstreamPayload
from energy_oracle.data_sources.fallback import mock_certification
from energy_oracle.domain import CertificationRecord, CertificationStatus, SourceTag


class CertificationPayload(UpstreamPayload):
    """Subset of the /verify response the oracle reads."""
    valid: bool = False
    status: CertificationStatus = CertificationStatus.UNKNOWN
    issued_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    energy_source: Optional[str] = None
    capacity: Optional[float] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    verification_hash: Optional[str] = None
    last_updated: Optional[datetime] = None

    @field_validator("valid", mode="before")
    @classmethod
    def null_is_invalid(cls, v):
        """A null validity flag means not valid."""
        return False if v is None else v

    @field_validator("status", mode="before")
    @classmethod
    def unknown_status(cls, v):
        """Statuses the registry adds later are reported as unknown."""
        if isinstance(v, str) and v.strip().lower() in {s.value for s in CertificationStatus}:
            return v.strip().lower()
        return CertificationStatus.UNKNOWN

    def to_record(self, certificate_id: str, issuer: str) -> CertificationRecord:
        """Translate the payload into a CertificationRecord."""
        return CertificationRecord(
            certificate_id=certificate_id,
            issuer=issuer,
            is_valid=self.valid,
            status=self.status,
            issued_date=self.issued_date,
            expiry_date=self.expiry_date,
            energy_source=self.energy_source,
            capacity=self.capacity,
            location=self.location,
            owner=self.owner,
            verification_hash=self.verification_hash,
            last_updated=self.last_updated,
            timestamp=datetime.now(timezone.utc),
            source_tag=SourceTag.LIVE,
        )


class CertificationClient(HttpSourceClient):
    """Validity checks for renewable-energy certificates."""

    name = "renewable_certs"

    def fetch_live(self, certificate_id: str, issuer: str) -> FetchResult[CertificationRecord]:
        """Call /verify and shape the response; never raises."""
        params = {"certificate_id": certificate_id, "issuer": issuer}
        return (
            self._get_json("verify", params)
            .then(lambda body: self._validate(CertificationPayload, body))
            .then(lambda payload: self._build(lambda: payload.to_record(certificate_id, issuer)))
        )

    def fetch(self, certificate_id: str, issuer: str) -> CertificationRecord:
        """Return the registry record, or a mock record if the live call fails."""
        return self._resolve(
            self.fetch_live(certificate_id, issuer),
            lambda: mock_certification(certificate_id, issuer, rng=self.rng),
            certificate_id=certificate_id,
            issuer=issuer,
        )

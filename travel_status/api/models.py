"""Request bodies for the HTTP API.

Fields are optional at the schema level so that a missing value is
reported as a validation error listing what is accepted, rather than a
generic 422.
"""

from typing import Any, Optional

from pydantic import BaseModel


class PhoneLookupRequest(BaseModel):
    phone_number: Optional[str] = None


class CertificateLookupRequest(BaseModel):
    certificate_number: Optional[str] = None


class CustomerDataRequest(BaseModel):
    """A raw customer row, as returned by the lookup endpoints."""

    customer_data: Optional[dict[str, Any]] = None


class MemoCreateRequest(BaseModel):
    memo_type: Optional[str] = None
    details: Optional[str] = None
    vac_id: Optional[str] = None
    phone_number: Optional[str] = None

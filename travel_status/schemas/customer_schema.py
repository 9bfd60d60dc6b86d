"""Customer, package policy, and memo data models.

Store rows use the legacy RIMS column names (``phn1``, ``pkg_code2``,
``Asgn_trv_DT`` ...). Each model accepts those names as aliases and the
canonical names as fields, so the engine never sees source naming.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from travel_status.utils import is_blank, parse_date, to_amount


class ActivationMethod(str, Enum):
    ONLINE = "online"
    MAIL = "mail"


class CustomerRecord(BaseModel):
    """One travel customer's policy-relevant facts, read-only per request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    phone_primary: str = Field("", alias="phn1")
    phone_secondary: str = Field("", alias="phn2")
    package_code: str = Field("", alias="pkg_code")
    certificate_code: str = Field("", alias="pkg_code2")
    customer_id: str = Field("", alias="vac_id")
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    deposit_validation: float = Field(0.0, alias="val_dep")
    deposit_confirmation: float = Field(0.0, alias="conf_deposit")
    travel_date: Optional[date] = Field(None, alias="Asgn_trv_DT")
    confirm_status: str = ""
    travel_rep: str = Field("", alias="tm")
    docs_sent_date: Optional[date] = Field(None, alias="date_print_enc")
    flight_ref: str = Field("", alias="agency_book_via")
    hotel_ref: str = Field("", alias="htl_bk_via")

    @field_validator(
        "phone_primary", "phone_secondary", "package_code", "certificate_code",
        "customer_id", "first_name", "last_name", "email", "travel_rep",
        "flight_ref", "hotel_ref",
        mode="before",
    )
    @classmethod
    def _blank_to_empty(cls, value: Any) -> str:
        if is_blank(value):
            return ""
        return str(value).strip()

    @field_validator("confirm_status", mode="before")
    @classmethod
    def _verbatim_status(cls, value: Any) -> str:
        if is_blank(value):
            return ""
        return str(value)

    @field_validator("deposit_validation", "deposit_confirmation", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("travel_date", "docs_sent_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "Unknown Customer"


class PackagePolicy(BaseModel):
    """Static reference data for a travel package."""

    code: str
    total_deposit: float
    activation_method: ActivationMethod = ActivationMethod.ONLINE
    destination_options: str = ""
    package_features: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def _upper_code(cls, value: Any) -> str:
        return str(value).strip().upper()

    @field_validator("total_deposit", mode="before")
    @classmethod
    def _coerce_deposit(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("activation_method", mode="before")
    @classmethod
    def _coerce_method(cls, value: Any) -> str:
        if isinstance(value, ActivationMethod):
            return value.value
        method = str(value or "").strip().lower()
        if method not in {m.value for m in ActivationMethod}:
            return ActivationMethod.ONLINE.value
        return method


class Memo(BaseModel):
    """A follow-up note attached to a customer."""

    model_config = ConfigDict(populate_by_name=True)

    memo_id: str
    memo_type: str
    details: str = ""
    customer_id: str = Field(alias="vac_id")
    phone_number: str = ""
    created_date: str
    created_by: str = "AI Agent"

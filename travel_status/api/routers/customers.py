"""Customer lookup and comprehensive status endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends

from travel_status.api.dependencies import Services, get_services
from travel_status.api.models import CertificateLookupRequest, PhoneLookupRequest
from travel_status.engine.booking import evaluate_booking
from travel_status.engine.deposits import evaluate_deposits
from travel_status.engine.travel_rep import CONFIRMED_STATUS
from travel_status.errors import InputValidationError
from travel_status.schemas.customer_schema import CustomerRecord, PackagePolicy
from travel_status.schemas.status_schema import DepositState
from travel_status.utils import normalize_phone

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_MESSAGE = "Customer not found in RIMS database"


def customer_payload(record: CustomerRecord) -> dict[str, Any]:
    payload = record.model_dump(mode="json")
    payload["full_name"] = record.full_name
    return payload


@router.get("/api/customer/status")
async def customer_status(
    phone: Optional[str] = None,
    certificate: Optional[str] = None,
    email: Optional[str] = None,
    services: Services = Depends(get_services),
):
    """Deposits, travel rep, booking and the recommended next action for a caller."""
    result = await services.aggregator.resolve(phone=phone, certificate=certificate, email=email)
    return result.model_dump(mode="json")


@router.get("/api/customer/lookup")
async def customer_lookup(
    phone: Optional[str] = None,
    certificate: Optional[str] = None,
    email: Optional[str] = None,
    services: Services = Depends(get_services),
):
    record = await services.aggregator.find_customer(
        phone=phone, certificate=certificate, email=email
    )
    if record is None:
        return {"found": False, "message": NOT_FOUND_MESSAGE}
    return {"found": True, "customer": customer_payload(record)}


@router.post("/api/rims/phone-lookup")
async def phone_lookup(body: PhoneLookupRequest, services: Services = Depends(get_services)):
    digits = normalize_phone(body.phone_number)
    if not digits:
        raise InputValidationError("Phone number is required", accepted=["phone_number"])
    record = await services.customers.find_by_phone(digits)
    if record is None:
        return {"found": False, "message": NOT_FOUND_MESSAGE}
    return {"found": True, "customer_data": record.model_dump(mode="json", by_alias=True)}


@router.post("/api/rims/certificate-lookup")
async def certificate_lookup(
    body: CertificateLookupRequest, services: Services = Depends(get_services)
):
    code = (body.certificate_number or "").strip()
    if not code:
        raise InputValidationError(
            "Certificate number is required", accepted=["certificate_number"]
        )
    record = await services.customers.find_by_certificate(code)
    if record is None:
        return {"found": False, "message": "Certificate not found in RIMS database"}
    return {"found": True, "customer_data": record.model_dump(mode="json", by_alias=True)}


def certificate_payload(record: CustomerRecord, policy: Optional[PackagePolicy]) -> dict[str, Any]:
    """Certificate view for the voice agent: deposit, confirmation, dates, rep and booking."""
    deposits = evaluate_deposits(record.deposit_validation, record.deposit_confirmation, policy)
    booking = evaluate_booking(record.flight_ref, record.hotel_ref)
    package = record.package_code or "Unknown"
    return {
        "certificate_number": record.certificate_code or record.package_code,
        "package_type": package,
        "destination": policy.destination_options if policy and policy.destination_options else package,
        "customer": {
            "phone": f"+1{record.phone_primary}" if record.phone_primary else "",
            "email": record.email,
            "first_name": record.first_name,
            "last_name": record.last_name,
        },
        "deposit": {
            "required": deposits.expected,
            "paid": deposits.state == DepositState.COMPLETE,
            "amount": deposits.total_paid,
            "date": None,
        },
        "status": "active" if record.confirm_status == CONFIRMED_STATUS else "pending",
        "dates": {
            "scheduled": record.travel_date is not None,
            "start": record.travel_date.isoformat() if record.travel_date else None,
            "end": None,
            "expiration": None,
        },
        "travel_rep": record.travel_rep or None,
        "booking": (
            {"flight": booking.flight_ref, "hotel": booking.hotel_ref}
            if booking.is_booked else None
        ),
    }


@router.get("/api/certificate/{certificate_number}")
async def certificate_details(certificate_number: str, services: Services = Depends(get_services)):
    """Look up a certificate by its code or by the numeric customer id."""
    code = certificate_number.strip()
    if not code:
        raise InputValidationError(
            "Certificate number is required", accepted=["certificate_number"]
        )
    record = await services.customers.find_by_certificate(code)
    if record is None:
        return {"found": False, "message": "Certificate not found"}
    policy = await services.aggregator.resolve_policy(record)
    return {"found": True, "certificate": certificate_payload(record, policy)}


@router.get("/api/refunds/{certificate_number}")
async def refund_status(certificate_number: str):
    # Refunds are not tracked in RIMS
    return {"has_refund": False, "message": "No refund request found for this certificate"}

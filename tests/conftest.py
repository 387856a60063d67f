"""
Pytest configuration and shared fixtures.

Everything runs against the in-memory backends; no Firebase project is needed.
"""
import asyncio
import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("PAYMENT_SIMULATION_DELAY", "0")

import pytest
import pytest_asyncio

from referralhub.core.config import settings
from referralhub.models.user import UserRole
from referralhub.services.analytics import AnalyticsService
from referralhub.services.auth_provider import AuthIdentity, InMemoryAuthProvider
from referralhub.services.document_store import InMemoryDocumentStore
from referralhub.services.storage import InMemoryObjectStore
from referralhub.services.user_service import ProfileService
from referralhub.api.v1.payments.gateway import SimulatedPaymentGateway
from referralhub.api.v1.payments.services import PaymentService
from referralhub.api.v1.referral_offers.services import ReferralOfferService
from referralhub.api.v1.referral_requests.services import ReferralRequestService
from referralhub.api.v1.referrals.services import ReferralService


@pytest.fixture(autouse=True)
def no_payment_delay(monkeypatch):
    """Simulated payments complete immediately"""
    monkeypatch.setattr(settings, "PAYMENT_SIMULATION_DELAY", 0)


class InterleavingDocumentStore(InMemoryDocumentStore):
    """Hands control back to the event loop after every read

    Concurrent callers then all read the same snapshot before any of them
    writes, which is the window a real network store leaves open.
    """

    async def get(self, collection, doc_id):
        doc = await super().get(collection, doc_id)
        await asyncio.sleep(0)
        return doc


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def interleaving_store():
    return InterleavingDocumentStore()


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def auth_provider():
    return InMemoryAuthProvider()


@pytest.fixture
def analytics(store):
    return AnalyticsService(store, enabled=True)


@pytest.fixture
def profiles(store, object_store, analytics):
    return ProfileService(store, object_store=object_store, analytics=analytics)


@pytest.fixture
def request_service(store, profiles, analytics):
    return ReferralRequestService(store, profiles=profiles, analytics=analytics)


@pytest.fixture
def offer_service(store, profiles, analytics):
    return ReferralOfferService(store, profiles=profiles, analytics=analytics)


@pytest.fixture
def referral_service(store, profiles, analytics):
    return ReferralService(store, profiles=profiles, analytics=analytics)


@pytest.fixture
def payment_service(store, analytics):
    return PaymentService(store, gateway=SimulatedPaymentGateway(delay=0), analytics=analytics)


@pytest_asyncio.fixture
async def student(profiles):
    """Student profile"""
    return await profiles.create_profile(
        AuthIdentity(uid="student-1", email="jane.doe@college.edu"),
        UserRole.STUDENT,
        {"display_name": "Jane Doe", "institution": "IIT Delhi", "major": "CS", "graduation_year": 2025}
    )


@pytest_asyncio.fixture
async def other_student(profiles):
    return await profiles.create_profile(
        AuthIdentity(uid="student-2", email="sam@college.edu"),
        UserRole.STUDENT,
        {"display_name": "Sam"}
    )


@pytest_asyncio.fixture
async def professional(profiles):
    """Professional profile"""
    return await profiles.create_profile(
        AuthIdentity(uid="pro-1", email="priya@acme.com"),
        UserRole.PROFESSIONAL,
        {"display_name": "Priya", "company": "Acme", "job_title": "Staff Engineer", "skills": ["python"]}
    )


@pytest_asyncio.fixture
async def pending_request(request_service, student, professional):
    """Fresh request from student to professional"""
    return await request_service.create_request(
        student=student,
        professional_id=professional.uid,
        job_position="Backend Engineer",
        company="Acme",
        message="Would love a referral"
    )


@pytest.fixture
def events(store):
    """Lookup of analytics events recorded in the in-memory store"""
    def events_named(name):
        collection = store._collections.get(settings.ANALYTICS_COLLECTION, {})
        return [event for event in collection.values() if event["name"] == name]
    return events_named


@pytest.fixture
def advance(request_service, payment_service, student, professional):
    """Drive a pending request into the given status"""
    async def _advance(request_id, status):
        if status == "pending":
            return await request_service.get_request(request_id)
        if status == "accepted":
            return await request_service.professional_respond(request_id, professional.uid, "accept")
        if status == "declined":
            return await request_service.professional_respond(request_id, professional.uid, "decline")
        if status == "cancelled":
            return await request_service.cancel(request_id, student.uid, "Found another referral")
        if status == "completed":
            await _advance(request_id, "accepted")
            return await request_service.mark_complete(request_id, professional.uid, "Referred")
        if status == "payment_requested":
            return await request_service.professional_respond(
                request_id, professional.uid, "request_payment", amount=5000
            )
        if status == "payment_accepted":
            await _advance(request_id, "payment_requested")
            return await request_service.student_respond_to_payment(request_id, student.uid, "accept")
        if status == "payment_rejected":
            await _advance(request_id, "payment_requested")
            return await request_service.student_respond_to_payment(request_id, student.uid, "reject")
        if status == "payment_completed":
            await _advance(request_id, "payment_accepted")
            await payment_service.complete_payment(request_id, student.uid, "upi", "jane@upi")
            return await request_service.get_request(request_id)
        raise ValueError(status)
    return _advance

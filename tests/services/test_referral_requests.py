"""
Unit tests for the referral request service.

Tests focus on business logic:
- Request creation and counters
- Lifecycle transitions and who may perform them
- Concurrent transitions
"""
import asyncio
import logging
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from referralhub.api.v1.referral_requests import services as services_module
from referralhub.core.config import settings
from referralhub.core.exceptions import (
    AuthorizationError,
    BlankFieldError,
    DuplicateDocumentError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from referralhub.models.referral_request import ReferralRequestAction, ReferralRequestStatus
from referralhub.models.user import UserRole
from referralhub.services.auth_provider import AuthIdentity


MOMENT = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

NON_PENDING = [
    "accepted",
    "declined",
    "payment_requested",
    "payment_accepted",
    "payment_rejected",
    "payment_completed",
    "completed",
    "cancelled",
]


@pytest_asyncio.fixture
async def second_professional(profiles):
    return await profiles.create_profile(
        AuthIdentity(uid="pro-2", email="raj@globex.com"),
        UserRole.PROFESSIONAL,
        {"display_name": "Raj", "company": "Globex"}
    )


class TestCreateRequest:
    """Tests for create_request"""

    @pytest.mark.asyncio
    async def test_creates_pending_request(self, request_service, student, professional):
        """Should store a pending request with denormalized names"""
        request = await request_service.create_request(
            student=student,
            professional_id=professional.uid,
            job_position="Backend Engineer",
            company="Acme"
        )

        assert request.status == ReferralRequestStatus.PENDING
        assert request.id.startswith("student-1_to_pro-1_")
        assert request.student_name == "Jane Doe"
        assert request.professional_name == "Priya"
        assert request.job_position == "Backend Engineer"

        stored = await request_service.get_request(request.id)
        assert stored.status == ReferralRequestStatus.PENDING
        assert stored.company == "Acme"

    @pytest.mark.asyncio
    async def test_increments_sent_requests(self, request_service, profiles, pending_request, student):
        """Should bump the student's sentRequests counter"""
        profile = await profiles.get_profile(student.uid)
        assert profile.sent_requests == 1

    @pytest.mark.asyncio
    async def test_logs_event(self, pending_request, events):
        sent = events("sent_referral_request")
        assert len(sent) == 1
        assert sent[0]["userId"] == "student-1"
        assert sent[0]["params"]["company"] == "Acme"

    @pytest.mark.asyncio
    async def test_professional_cannot_create(self, request_service, professional, second_professional):
        """Should reject requests sent by professionals"""
        with pytest.raises(AuthorizationError):
            await request_service.create_request(
                student=professional,
                professional_id=second_professional.uid,
                job_position="Backend Engineer",
                company="Acme"
            )

    @pytest.mark.asyncio
    async def test_target_must_be_professional(self, request_service, student, other_student):
        with pytest.raises(ValidationError):
            await request_service.create_request(
                student=student,
                professional_id=other_student.uid,
                job_position="Backend Engineer",
                company="Acme"
            )

    @pytest.mark.asyncio
    async def test_unknown_professional(self, request_service, student):
        with pytest.raises(NotFoundError):
            await request_service.create_request(
                student=student,
                professional_id="nobody",
                job_position="Backend Engineer",
                company="Acme"
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("job_position,company", [("", "Acme"), ("Backend Engineer", "   ")])
    async def test_blank_fields_rejected(self, request_service, student, professional, job_position, company):
        """Should require position and company"""
        with pytest.raises(BlankFieldError):
            await request_service.create_request(
                student=student,
                professional_id=professional.uid,
                job_position=job_position,
                company=company
            )


class TestProfessionalRespond:
    """Tests for professional_respond"""

    @pytest.mark.asyncio
    async def test_accept(self, request_service, pending_request, professional):
        request = await request_service.professional_respond(
            pending_request.id, professional.uid, ReferralRequestAction.ACCEPT, message="Happy to help"
        )
        assert request.status == ReferralRequestStatus.ACCEPTED
        assert request.payment_required is False
        assert request.professional_message == "Happy to help"

    @pytest.mark.asyncio
    async def test_decline(self, request_service, pending_request, professional):
        request = await request_service.professional_respond(
            pending_request.id, professional.uid, ReferralRequestAction.DECLINE
        )
        assert request.status == ReferralRequestStatus.DECLINED

    @pytest.mark.asyncio
    async def test_request_payment(self, request_service, pending_request, professional):
        """Should move to payment_requested with the amount recorded"""
        request = await request_service.professional_respond(
            pending_request.id, professional.uid, ReferralRequestAction.REQUEST_PAYMENT, amount=5000
        )
        assert request.status == ReferralRequestStatus.PAYMENT_REQUESTED
        assert request.payment_required is True
        assert request.payment_amount == 5000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -10, None])
    async def test_request_payment_requires_positive_amount(
        self, request_service, pending_request, professional, amount
    ):
        with pytest.raises(ValidationError):
            await request_service.professional_respond(
                pending_request.id, professional.uid, ReferralRequestAction.REQUEST_PAYMENT, amount=amount
            )

        stored = await request_service.get_request(pending_request.id)
        assert stored.status == ReferralRequestStatus.PENDING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", NON_PENDING)
    async def test_fails_when_not_pending(self, request_service, pending_request, professional, advance, status):
        """Should reject every response once the request left pending"""
        await advance(pending_request.id, status)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await request_service.professional_respond(
                pending_request.id, professional.uid, ReferralRequestAction.ACCEPT
            )
        assert exc_info.value.current_status == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", NON_PENDING)
    async def test_status_checked_before_amount(
        self, request_service, pending_request, professional, advance, status
    ):
        """A bad amount on a request that left pending is still a transition error"""
        await advance(pending_request.id, status)

        with pytest.raises(InvalidTransitionError):
            await request_service.professional_respond(
                pending_request.id, professional.uid, ReferralRequestAction.REQUEST_PAYMENT, amount=0
            )

    @pytest.mark.asyncio
    async def test_student_cannot_respond(self, request_service, pending_request, student):
        with pytest.raises(AuthorizationError):
            await request_service.professional_respond(
                pending_request.id, student.uid, ReferralRequestAction.ACCEPT
            )

    @pytest.mark.asyncio
    async def test_non_participant_cannot_respond(self, request_service, pending_request, other_student):
        with pytest.raises(AuthorizationError):
            await request_service.professional_respond(
                pending_request.id, other_student.uid, ReferralRequestAction.DECLINE
            )

    @pytest.mark.asyncio
    async def test_rejects_other_actions(self, request_service, pending_request, professional):
        with pytest.raises(ValidationError):
            await request_service.professional_respond(
                pending_request.id, professional.uid, ReferralRequestAction.CANCEL
            )

    @pytest.mark.asyncio
    async def test_unknown_request(self, request_service, professional):
        with pytest.raises(NotFoundError):
            await request_service.professional_respond("missing", professional.uid, ReferralRequestAction.ACCEPT)


class TestStudentRespondToPayment:
    """Tests for student_respond_to_payment"""

    @pytest.mark.asyncio
    async def test_accept_payment(self, request_service, pending_request, student, advance, events):
        await advance(pending_request.id, "payment_requested")

        request = await request_service.student_respond_to_payment(pending_request.id, student.uid, "accept")

        assert request.status == ReferralRequestStatus.PAYMENT_ACCEPTED
        assert len(events("accepted_payment_request")) == 1

    @pytest.mark.asyncio
    async def test_reject_payment(self, request_service, pending_request, student, advance):
        await advance(pending_request.id, "payment_requested")

        request = await request_service.student_respond_to_payment(pending_request.id, student.uid, "reject")

        assert request.status == ReferralRequestStatus.PAYMENT_REJECTED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [s for s in ["pending"] + NON_PENDING if s != "payment_requested"])
    async def test_fails_when_not_payment_requested(
        self, request_service, pending_request, student, advance, status
    ):
        await advance(pending_request.id, status)

        with pytest.raises(InvalidTransitionError):
            await request_service.student_respond_to_payment(pending_request.id, student.uid, "accept")

    @pytest.mark.asyncio
    async def test_professional_cannot_answer(self, request_service, pending_request, professional, advance):
        await advance(pending_request.id, "payment_requested")

        with pytest.raises(AuthorizationError):
            await request_service.student_respond_to_payment(pending_request.id, professional.uid, "accept")

    @pytest.mark.asyncio
    async def test_unknown_decision(self, request_service, pending_request, student, advance):
        await advance(pending_request.id, "payment_requested")

        with pytest.raises(ValidationError):
            await request_service.student_respond_to_payment(pending_request.id, student.uid, "maybe")


class TestCancel:
    """Tests for cancel"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["pending", "accepted", "payment_requested"])
    async def test_cancel_allowed(self, request_service, pending_request, student, advance, status):
        await advance(pending_request.id, status)

        request = await request_service.cancel(pending_request.id, student.uid, "No longer looking")

        assert request.status == ReferralRequestStatus.CANCELLED
        assert request.cancel_reason == "No longer looking"
        assert request.cancelled_by == student.uid
        assert request.cancelled_at is not None

    @pytest.mark.asyncio
    async def test_professional_may_cancel(self, request_service, pending_request, professional):
        request = await request_service.cancel(pending_request.id, professional.uid, "Position filled")
        assert request.status == ReferralRequestStatus.CANCELLED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        ["declined", "completed", "cancelled", "payment_rejected", "payment_accepted", "payment_completed"]
    )
    async def test_cancel_rejected(self, request_service, pending_request, student, advance, status):
        await advance(pending_request.id, status)

        with pytest.raises(InvalidTransitionError):
            await request_service.cancel(pending_request.id, student.uid, "Changed my mind")

    @pytest.mark.asyncio
    async def test_reason_required(self, request_service, pending_request, student):
        with pytest.raises(ValidationError):
            await request_service.cancel(pending_request.id, student.uid, "  ")

    @pytest.mark.asyncio
    async def test_status_checked_before_reason(self, request_service, pending_request, student, advance):
        await advance(pending_request.id, "completed")

        with pytest.raises(InvalidTransitionError):
            await request_service.cancel(pending_request.id, student.uid, "")

    @pytest.mark.asyncio
    async def test_non_participant(self, request_service, pending_request, other_student):
        with pytest.raises(AuthorizationError):
            await request_service.cancel(pending_request.id, other_student.uid, "Not mine")


class TestMarkComplete:
    """Tests for mark_complete"""

    @pytest.mark.asyncio
    async def test_round_trip(self, request_service, student, professional):
        """pending -> accepted -> completed, then nothing else is allowed"""
        request = await request_service.create_request(
            student=student,
            professional_id=professional.uid,
            job_position="Backend Engineer",
            company="Acme"
        )
        assert request.status == ReferralRequestStatus.PENDING

        request = await request_service.professional_respond(request.id, professional.uid, "accept")
        assert request.status == ReferralRequestStatus.ACCEPTED

        request = await request_service.mark_complete(request.id, student.uid, "Got the interview")
        assert request.status == ReferralRequestStatus.COMPLETED
        assert request.completed_by == student.uid
        assert request.completion_message == "Got the interview"

        for attempt in (
            request_service.mark_complete(request.id, professional.uid),
            request_service.cancel(request.id, student.uid, "Too late"),
            request_service.professional_respond(request.id, professional.uid, "decline"),
        ):
            with pytest.raises(InvalidTransitionError):
                await attempt

    @pytest.mark.asyncio
    async def test_either_participant(self, request_service, pending_request, professional, advance):
        await advance(pending_request.id, "accepted")

        request = await request_service.mark_complete(pending_request.id, professional.uid)

        assert request.status == ReferralRequestStatus.COMPLETED
        assert request.completed_by == professional.uid

    @pytest.mark.asyncio
    async def test_complete_twice_rejected(self, request_service, pending_request, student, advance):
        """Should not accept a second completion"""
        await advance(pending_request.id, "completed")

        with pytest.raises(InvalidTransitionError):
            await request_service.mark_complete(pending_request.id, student.uid)

    @pytest.mark.asyncio
    async def test_complete_from_pending_rejected(self, request_service, pending_request, student):
        with pytest.raises(InvalidTransitionError):
            await request_service.mark_complete(pending_request.id, student.uid)

    @pytest.mark.asyncio
    async def test_complete_after_payment(self, request_service, pending_request, student, advance):
        await advance(pending_request.id, "payment_completed")

        request = await request_service.mark_complete(pending_request.id, student.uid)

        assert request.status == ReferralRequestStatus.COMPLETED


class TestConcurrency:
    """Callers racing on the same request, with reads that yield"""

    @pytest.fixture
    def store(self, interleaving_store):
        return interleaving_store

    @pytest.mark.asyncio
    async def test_double_transition_applies_once(
        self, request_service, pending_request, professional, caplog
    ):
        """Both calls see pending; only one compare-and-set lands"""
        caplog.set_level(logging.WARNING)

        results = await asyncio.gather(
            request_service.professional_respond(pending_request.id, professional.uid, "accept"),
            request_service.professional_respond(pending_request.id, professional.uid, "decline"),
            return_exceptions=True
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], InvalidTransitionError)
        assert failed[0].current_status == succeeded[0].status.value
        assert "Lost race" in caplog.text

        stored = await request_service.get_request(pending_request.id)
        assert stored.status == succeeded[0].status

    @pytest.mark.asyncio
    async def test_concurrent_creates_count_every_request(
        self, request_service, profiles, student, professional, second_professional
    ):
        """Counter increments must not be lost"""
        await asyncio.gather(
            request_service.create_request(student, professional.uid, "Backend Engineer", "Acme"),
            request_service.create_request(student, second_professional.uid, "Data Engineer", "Globex"),
        )

        profile = await profiles.get_profile(student.uid)
        assert profile.sent_requests == 2

    @pytest.mark.asyncio
    async def test_same_millisecond_creates_get_distinct_ids(
        self, request_service, profiles, student, professional, monkeypatch
    ):
        """Should never overwrite a request created in the same millisecond"""
        monkeypatch.setattr(services_module, "utcnow", lambda: MOMENT)

        first, second = await asyncio.gather(
            request_service.create_request(student, professional.uid, "Backend Engineer", "Acme"),
            request_service.create_request(student, professional.uid, "Data Engineer", "Acme"),
        )

        assert first.id != second.id
        assert {first.id, second.id} == {
            "student-1_to_pro-1_1705320000000",
            "student-1_to_pro-1_1705320000001",
        }
        sent = await request_service.list_sent(student.uid)
        assert {request.job_position for request in sent} == {"Backend Engineer", "Data Engineer"}

        profile = await profiles.get_profile(student.uid)
        assert profile.sent_requests == 2


class TestIdAllocation:

    @pytest.mark.asyncio
    async def test_gives_up_when_ids_are_exhausted(
        self, request_service, profiles, student, professional, monkeypatch
    ):
        monkeypatch.setattr(services_module, "utcnow", lambda: MOMENT)
        monkeypatch.setattr(settings, "ID_ALLOCATION_ATTEMPTS", 1)
        await request_service.create_request(student, professional.uid, "Backend Engineer", "Acme")

        with pytest.raises(DuplicateDocumentError):
            await request_service.create_request(student, professional.uid, "Data Engineer", "Acme")

        profile = await profiles.get_profile(student.uid)
        assert profile.sent_requests == 1


class TestQueries:
    """Tests for get_request and listings"""

    @pytest.mark.asyncio
    async def test_non_participant_cannot_read(self, request_service, pending_request, other_student):
        with pytest.raises(AuthorizationError):
            await request_service.get_request(pending_request.id, actor_id=other_student.uid)

    @pytest.mark.asyncio
    async def test_participants_can_read(self, request_service, pending_request, student, professional):
        for uid in (student.uid, professional.uid):
            request = await request_service.get_request(pending_request.id, actor_id=uid)
            assert request.id == pending_request.id

    @pytest.mark.asyncio
    async def test_missing_request(self, request_service):
        with pytest.raises(NotFoundError):
            await request_service.get_request("missing")

    @pytest.mark.asyncio
    async def test_listings_newest_first(
        self, request_service, student, professional, second_professional
    ):
        first = await request_service.create_request(student, professional.uid, "Backend Engineer", "Acme")
        await asyncio.sleep(0.01)
        second = await request_service.create_request(student, second_professional.uid, "Data Engineer", "Globex")

        sent = await request_service.list_sent(student.uid)
        assert [r.id for r in sent] == [second.id, first.id]

        received = await request_service.list_received(professional.uid)
        assert [r.id for r in received] == [first.id]
        assert await request_service.list_received("nobody") == []

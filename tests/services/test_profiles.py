"""
Unit tests for the profile service.
"""
import pytest

from referralhub.core.exceptions import (
    NotFoundError,
    RoleChangeNotAllowedError,
    ValidationError,
)
from referralhub.models.user import UserRole
from referralhub.services.auth_provider import AuthIdentity


class TestCreateProfile:

    @pytest.mark.asyncio
    async def test_student_profile(self, student, store):
        assert student.user_type == UserRole.STUDENT
        assert student.institution == "IIT Delhi"
        assert student.company is None
        assert student.referral_code.startswith("DEVGNANJAN")
        assert len(student.referral_code) == len("DEVGNAN") + 6

        stored = await store.get("users", student.uid)
        assert stored["userType"] == "student"
        assert stored["referralsGenerated"] == 0
        assert stored["photoURL"] == ""

    @pytest.mark.asyncio
    async def test_keeps_only_role_fields(self, profiles):
        """Professional data on a student sign-up is dropped"""
        profile = await profiles.create_profile(
            AuthIdentity(uid="s-9", email="kim@college.edu"),
            UserRole.STUDENT,
            {"institution": "NIT", "company": "Acme"}
        )
        assert profile.institution == "NIT"
        assert profile.company is None

    @pytest.mark.asyncio
    async def test_professional_defaults_skills(self, profiles):
        profile = await profiles.create_profile(
            AuthIdentity(uid="p-9", email="lee@corp.com"),
            UserRole.PROFESSIONAL,
            {"company": "Corp"}
        )
        assert profile.skills == []

    @pytest.mark.asyncio
    async def test_logs_sign_up(self, student, events):
        signups = events("sign_up")
        assert signups[0]["params"] == {"method": "email", "user_type": "student"}


class TestUpdateProfile:

    @pytest.mark.asyncio
    async def test_updates_editable_fields(self, profiles, student, store):
        updated = await profiles.update_profile(student.uid, {"major": "EE", "display_name": "Jane D."})

        assert updated.major == "EE"
        assert updated.display_name == "Jane D."
        stored = await store.get("users", student.uid)
        assert stored["major"] == "EE"
        assert stored["displayName"] == "Jane D."
        assert stored["institution"] == "IIT Delhi"

    @pytest.mark.asyncio
    async def test_role_is_immutable(self, profiles, student):
        with pytest.raises(RoleChangeNotAllowedError):
            await profiles.update_profile(student.uid, {"user_type": UserRole.PROFESSIONAL})

        profile = await profiles.get_profile(student.uid)
        assert profile.user_type == UserRole.STUDENT

    @pytest.mark.asyncio
    async def test_same_role_is_ignored(self, profiles, student):
        updated = await profiles.update_profile(student.uid, {"user_type": "student", "major": "ME"})
        assert updated.major == "ME"

    @pytest.mark.asyncio
    async def test_counters_read_only(self, profiles, student):
        with pytest.raises(ValidationError):
            await profiles.update_profile(student.uid, {"successful_referrals": 99})

    @pytest.mark.asyncio
    async def test_foreign_role_fields_rejected(self, profiles, student):
        with pytest.raises(ValidationError):
            await profiles.update_profile(student.uid, {"company": "Acme"})

    @pytest.mark.asyncio
    async def test_missing_profile(self, profiles):
        with pytest.raises(NotFoundError):
            await profiles.update_profile("nobody", {"major": "EE"})


class TestProfileImage:

    @pytest.mark.asyncio
    async def test_upload(self, profiles, student, object_store):
        url = await profiles.upload_profile_image(student.uid, b"\x89PNG", "me.png", "image/png")

        assert url.startswith("memory://")
        profile = await profiles.get_profile(student.uid)
        assert profile.photo_url == url

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data,filename", [(b"data", "me.gif"), (b"", "me.png")])
    async def test_rejects_bad_uploads(self, profiles, student, data, filename):
        with pytest.raises(ValidationError):
            await profiles.upload_profile_image(student.uid, data, filename)


class TestDirectory:

    @pytest.mark.asyncio
    async def test_professionals_by_successful_referrals(self, profiles, professional, store):
        other = await profiles.create_profile(
            AuthIdentity(uid="pro-2", email="raj@globex.com"),
            UserRole.PROFESSIONAL,
            {"company": "Globex"}
        )
        await profiles.increment_counter(other.uid, "successful_referrals", 3)

        listed = await profiles.list_by_role(UserRole.PROFESSIONAL)

        assert [p.uid for p in listed] == [other.uid, professional.uid]
        assert listed[0].successful_referrals == 3

    @pytest.mark.asyncio
    async def test_students_only(self, profiles, student, other_student, professional):
        listed = await profiles.list_by_role(UserRole.STUDENT)
        assert {p.uid for p in listed} == {student.uid, other_student.uid}

    @pytest.mark.asyncio
    async def test_limit(self, profiles, student, other_student):
        listed = await profiles.list_by_role(UserRole.STUDENT, limit=1)
        assert len(listed) == 1

    @pytest.mark.asyncio
    async def test_unknown_counter(self, profiles, student):
        with pytest.raises(ValueError):
            await profiles.increment_counter(student.uid, "display_name")

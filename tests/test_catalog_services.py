from __future__ import annotations

from datetime import date

import pytest
from pymongo.errors import AutoReconnect

from schooladmin.core.exceptions import DuplicateKeyError, NotFoundError, ValidationFailure
from schooladmin.models import (
    ActivityCreate,
    ActivityUpdate,
    ClassGroupCreate,
    ClassGroupUpdate,
    ScheduleConflictRequest,
    SchoolCreate,
    SchoolUpdate,
    StudentCreate,
    StudentUpdate,
    TruckCreate,
    TruckUpdate,
)

ACTOR = "admin@example.com"


async def test_student_round_trip(backend):
    school_id = await backend.add_school()
    group_id = await backend.add_class_group(school_id)
    data = StudentCreate(
        reference="REF001",
        first_name="Ada",
        last_name="Lovelace",
        date_of_birth=date(2015, 12, 10),
        gender="F",
        language="EN",
        grade="1",
        school_id=school_id,
        class_group_id=group_id,
        notes="Allergic to peanuts",
    )

    created = await backend.services.students.create(data)
    fetched = await backend.services.students.get(created.id)

    assert fetched.model_dump(include=set(StudentCreate.model_fields)) == data.model_dump()
    assert fetched.updated_at is None


async def test_archived_student_is_hidden(backend):
    student_id = await backend.add_student("R001")

    await backend.services.students.archive(student_id, ACTOR)

    with pytest.raises(NotFoundError):
        await backend.services.students.get(student_id)
    page = await backend.services.students.list()
    assert page.total == 0


async def test_archive_twice_is_a_noop(backend):
    student_id = await backend.add_student("R001")

    await backend.services.students.archive(student_id, ACTOR)
    await backend.services.students.archive(student_id, ACTOR)

    entries = await backend.services.audit.list_for_entity("Student", student_id)
    assert [(e.field, e.old_value, e.new_value) for e in entries] == [("is_active", "true", "false")]


async def test_archive_unknown_record_is_not_found(backend):
    with pytest.raises(NotFoundError):
        await backend.services.schools.archive(42, ACTOR)


async def test_update_audits_only_changed_fields(backend):
    school = await backend.services.schools.create(SchoolCreate(name="Hillcrest", phone="021 555 0100"))

    updated = await backend.services.schools.update(
        school.id, SchoolUpdate(name="Hillcrest", contact_person="Ms Dlamini"), ACTOR
    )

    assert updated.contact_person == "Ms Dlamini"
    assert updated.phone == "021 555 0100"
    assert updated.updated_at is not None
    entries = await backend.services.audit.list_for_entity("School", school.id)
    assert [(e.field, e.old_value, e.new_value) for e in entries] == [("contact_person", None, "Ms Dlamini")]


async def test_update_without_changes_writes_nothing(backend):
    student_id = await backend.add_student("R001")

    unchanged = await backend.services.students.update(student_id, StudentUpdate(first_name="Ada"), ACTOR)

    assert unchanged.updated_at is None
    assert await backend.services.audit.list_for_entity("Student", student_id) == []


async def test_required_field_cannot_be_cleared(backend):
    school = await backend.services.schools.create(SchoolCreate(name="Hillcrest"))

    with pytest.raises(ValidationFailure):
        await backend.services.schools.update(school.id, SchoolUpdate(name=None), ACTOR)


async def test_activity_code_can_be_cleared(backend):
    activity = await backend.services.activities.create(ActivityCreate(name="Chess", code="CHS"))

    updated = await backend.services.activities.update(activity.id, ActivityUpdate(code=""), ACTOR)

    assert updated.code is None


async def test_list_searches_and_pages(backend):
    for i, name in enumerate(["Ada", "Alan", "Grace", "Adele"], start=1):
        await backend.add_student(f"R00{i}", first_name=name, last_name="Smith")

    page = await backend.services.students.list(search="ad", page=1, page_size=1)

    assert page.total == 2
    assert page.page_size == 1
    assert [s.first_name for s in page.items] == ["Ada"]


async def test_page_size_is_clamped(backend):
    page = await backend.services.schools.list(page=0, page_size=10_000)

    assert page.page == 1
    assert page.page_size == 200


async def test_class_group_requires_active_school(backend):
    school_id = await backend.add_school()
    await backend.services.schools.archive(school_id, ACTOR)

    with pytest.raises(NotFoundError):
        await backend.services.class_groups.create(
            ClassGroupCreate(name="Gr1-Mon", school_id=school_id, day_of_week=0, start_time="08:00", end_time="09:00")
        )


async def test_class_group_end_time_after_start(backend):
    school_id = await backend.add_school()

    with pytest.raises(ValidationFailure):
        await backend.services.class_groups.create(
            ClassGroupCreate(name="Gr1-Mon", school_id=school_id, day_of_week=0, start_time="09:00", end_time="08:30")
        )


async def test_class_groups_filter_by_school(backend):
    first = await backend.add_school("Hillcrest")
    second = await backend.add_school("Riverside")
    await backend.add_class_group(first, name="Gr1-Mon")
    await backend.add_class_group(second, name="Gr2-Tue")

    page = await backend.services.class_groups.list(filters={"school_id": second})

    assert [g.name for g in page.items] == ["Gr2-Tue"]


async def test_unknown_audit_entity_type_is_rejected(backend):
    with pytest.raises(ValidationFailure):
        await backend.services.audit.list_for_entity("Invoice", 1)


async def test_update_rolls_back_when_audit_write_fails(backend):
    school = await backend.services.schools.create(SchoolCreate(name="Hillcrest"))
    backend.audit_log.fail_with = AutoReconnect("audit node unreachable")

    with pytest.raises(AutoReconnect):
        await backend.services.schools.update(school.id, SchoolUpdate(name="Hillcrest College"), ACTOR)

    unchanged = await backend.services.schools.get(school.id)
    assert unchanged.name == "Hillcrest"
    assert unchanged.updated_at is None
    assert backend.transactions.aborted == 1


async def test_archive_rolls_back_when_audit_write_fails(backend):
    student_id = await backend.add_student("R001")
    backend.audit_log.fail_with = AutoReconnect("audit node unreachable")

    with pytest.raises(AutoReconnect):
        await backend.services.students.archive(student_id, ACTOR)

    still_there = await backend.services.students.get(student_id)
    assert still_there.is_active is True


async def test_truck_registration_is_unique_among_active_trucks(backend):
    first = await backend.services.trucks.create(TruckCreate(name="Blue Truck", registration_number=" CA 123-456 "))

    with pytest.raises(DuplicateKeyError) as excinfo:
        await backend.services.trucks.create(TruckCreate(name="Red Truck", registration_number="CA 123-456"))

    assert first.registration_number == "CA 123-456"
    assert first.status == "Active"
    assert excinfo.value.field == "registration_number"
    await backend.services.trucks.archive(first.id, ACTOR)
    again = await backend.services.trucks.create(TruckCreate(name="Red Truck", registration_number="CA 123-456"))
    assert again.id != first.id


async def test_truck_update_is_audited(backend):
    truck_id = await backend.add_truck("CA 1")

    updated = await backend.services.trucks.update(truck_id, TruckUpdate(status="In Service"), ACTOR)

    assert updated.status == "In Service"
    entries = await backend.services.audit.list_for_entity("Truck", truck_id)
    assert [(e.field, e.old_value, e.new_value) for e in entries] == [("status", "Active", "In Service")]


async def test_class_group_with_unknown_truck_is_rejected(backend):
    school_id = await backend.add_school()

    with pytest.raises(NotFoundError) as excinfo:
        await backend.services.class_groups.create(
            ClassGroupCreate(
                name="Gr1-Mon", school_id=school_id, truck_id=9, day_of_week=0, start_time="08:00", end_time="09:00"
            )
        )

    assert excinfo.value.entity == "Truck"
    assert backend.class_groups.rows == {}


async def test_class_group_update_checks_times_against_stored_values(backend):
    school_id = await backend.add_school()
    group_id = await backend.add_class_group(school_id)

    updated = await backend.services.class_groups.update(group_id, ClassGroupUpdate(end_time="10:30"), ACTOR)
    assert updated.end_time == "10:30"

    with pytest.raises(ValidationFailure):
        await backend.services.class_groups.update(group_id, ClassGroupUpdate(start_time="11:00"), ACTOR)
    assert (await backend.services.class_groups.get(group_id)).start_time == "08:00"


@pytest.fixture
async def truck_day(backend):
    school_id = await backend.add_school("Hillcrest")
    truck_id = await backend.add_truck("CA 1")
    morning = await backend.add_class_group(school_id, name="Gr1-Mon", truck_id=truck_id, start_time="08:00", end_time="09:00")
    await backend.add_class_group(school_id, name="Gr2-Mon", truck_id=truck_id, start_time="10:00", end_time="11:00")
    await backend.add_class_group(school_id, name="Gr3-Tue", truck_id=truck_id, day_of_week=1, start_time="08:00", end_time="09:00")
    return truck_id, morning


async def test_overlapping_slot_on_same_truck_and_day_conflicts(backend, truck_day):
    truck_id, morning = truck_day

    result = await backend.services.class_groups.check_conflicts(
        ScheduleConflictRequest(truck_id=truck_id, day_of_week=0, start_time="08:30", end_time="10:15")
    )

    assert result.has_conflicts is True
    assert [(c.name, c.school_name) for c in result.conflicts] == [("Gr1-Mon", "Hillcrest"), ("Gr2-Mon", "Hillcrest")]


async def test_touching_slots_do_not_conflict(backend, truck_day):
    truck_id, _ = truck_day

    result = await backend.services.class_groups.check_conflicts(
        ScheduleConflictRequest(truck_id=truck_id, day_of_week=0, start_time="09:00", end_time="10:00")
    )

    assert result.has_conflicts is False
    assert result.conflicts == []


async def test_conflict_check_skips_the_group_being_edited(backend, truck_day):
    truck_id, morning = truck_day

    result = await backend.services.class_groups.check_conflicts(
        ScheduleConflictRequest(truck_id=truck_id, day_of_week=0, start_time="08:15", end_time="08:45", exclude_id=morning)
    )

    assert result.has_conflicts is False


async def test_other_trucks_and_archived_groups_do_not_conflict(backend, truck_day):
    truck_id, morning = truck_day
    other_truck = await backend.add_truck("CA 2")
    await backend.services.class_groups.archive(morning, ACTOR)

    own = await backend.services.class_groups.check_conflicts(
        ScheduleConflictRequest(truck_id=truck_id, day_of_week=0, start_time="08:00", end_time="09:00")
    )
    other = await backend.services.class_groups.check_conflicts(
        ScheduleConflictRequest(truck_id=other_truck, day_of_week=0, start_time="08:00", end_time="11:00")
    )

    assert own.has_conflicts is False
    assert other.has_conflicts is False

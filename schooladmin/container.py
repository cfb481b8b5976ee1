"""Wiring of repositories and services for the running application."""
from dataclasses import dataclass

from schooladmin.db import MongoTransactions
from schooladmin.repositories.mongo import (
    ActivityRepository,
    ClassGroupRepository,
    MongoAttendanceRepository,
    MongoAuditLogRepository,
    SchoolRepository,
    StudentRepository,
    TruckRepository,
)
from schooladmin.repositories.protocols import AttendanceRepository, AuditLogRepository, EntityRepository, Transactions
from schooladmin.services.activities import ActivityService
from schooladmin.services.attendance import AttendanceService
from schooladmin.services.audit import AuditService
from schooladmin.services.class_groups import ClassGroupService
from schooladmin.services.schools import SchoolService
from schooladmin.services.students import StudentService
from schooladmin.services.trucks import TruckService


@dataclass(frozen=True)
class Container:
    students: StudentService
    schools: SchoolService
    activities: ActivityService
    trucks: TruckService
    class_groups: ClassGroupService
    attendance: AttendanceService
    audit: AuditService


def build_container(
    *,
    students: EntityRepository,
    schools: EntityRepository,
    activities: EntityRepository,
    trucks: EntityRepository,
    class_groups: EntityRepository,
    attendance: AttendanceRepository,
    audit_log: AuditLogRepository,
    transactions: Transactions,
) -> Container:
    audit = AuditService(audit_log)
    return Container(
        students=StudentService(students, audit, transactions, schools, class_groups),
        schools=SchoolService(schools, audit, transactions),
        activities=ActivityService(activities, audit, transactions),
        trucks=TruckService(trucks, audit, transactions),
        class_groups=ClassGroupService(class_groups, audit, transactions, schools, trucks),
        attendance=AttendanceService(attendance, students, class_groups, audit, transactions),
        audit=audit,
    )


def build_mongo_container() -> Container:
    return build_container(
        students=StudentRepository(),
        schools=SchoolRepository(),
        activities=ActivityRepository(),
        trucks=TruckRepository(),
        class_groups=ClassGroupRepository(),
        attendance=MongoAttendanceRepository(),
        audit_log=MongoAuditLogRepository(),
        transactions=MongoTransactions(),
    )

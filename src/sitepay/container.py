from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .database.gateway import Gateway, MySQLGateway
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentRequestService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .statistics.service import StatisticsService
from .workers.mysql_worker_repository import MySQLWorkerRepository
from .workers.repository import WorkerRepository


@dataclass(frozen=True)
class Container:
    workers_repo: WorkerRepository
    projects_repo: ProjectRepository
    attendance_repo: AttendanceRepository
    payments_repo: PaymentRepository

    attendance_service: AttendanceService
    payment_service: PaymentRequestService
    statistics_service: StatisticsService

    # None when wired with in-memory repositories
    gateway: Optional[Gateway] = None


def build_services(
    *,
    workers_repo: WorkerRepository,
    projects_repo: ProjectRepository,
    attendance_repo: AttendanceRepository,
    payments_repo: PaymentRepository,
    gateway: Optional[Gateway] = None,
) -> Container:
    return Container(
        workers_repo=workers_repo,
        projects_repo=projects_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
        attendance_service=AttendanceService(attendance_repo, workers_repo, projects_repo),
        payment_service=PaymentRequestService(payments_repo, workers_repo, projects_repo),
        statistics_service=StatisticsService(attendance_repo, payments_repo, workers_repo),
        gateway=gateway,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    gateway = MySQLGateway(conn)

    return build_services(
        workers_repo=MySQLWorkerRepository(gateway),
        projects_repo=MySQLProjectRepository(gateway),
        attendance_repo=MySQLAttendanceRepository(gateway),
        payments_repo=MySQLPaymentRepository(gateway),
        gateway=gateway,
    )

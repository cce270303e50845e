from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceService
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .events.cache import CachedEventRepository
from .events.formatting import EventFormatter
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .players.mysql_player_repository import MySQLPlayerRepository
from .players.repository import PlayerRepository
from .players.service import PlayerService
from .sweep.service import EventStatusSweeper
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.repository import TeamRepository
from .teams.service import TeamService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    teams_repo: TeamRepository
    players_repo: PlayerRepository
    events_repo: EventRepository

    auth_service: AuthService
    user_service: UserService
    team_service: TeamService
    player_service: PlayerService
    event_service: EventService
    attendance_service: AttendanceService
    dashboard_service: DashboardService
    sweeper: EventStatusSweeper


def wire(
    *,
    users_repo: UserRepository,
    teams_repo: TeamRepository,
    players_repo: PlayerRepository,
    events_repo: EventRepository,
    formatter: Optional[EventFormatter] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of the given repositories."""
    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo)
    team_service = TeamService(teams_repo, players_repo)
    player_service = PlayerService(players_repo, teams_repo, users_repo)
    event_service = EventService(events_repo, teams_repo, players_repo, formatter=formatter)
    attendance_service = AttendanceService(events_repo, players_repo, event_service)
    dashboard_service = DashboardService(team_service, player_service, event_service)

    return Container(
        conn=conn,
        users_repo=users_repo,
        teams_repo=teams_repo,
        players_repo=players_repo,
        events_repo=events_repo,
        auth_service=auth_service,
        user_service=user_service,
        team_service=team_service,
        player_service=player_service,
        event_service=event_service,
        attendance_service=attendance_service,
        dashboard_service=dashboard_service,
        sweeper=EventStatusSweeper(events_repo),
    )


def build_container(*, db_config: dict, formatter: Optional[EventFormatter] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        players_repo=MySQLPlayerRepository(conn),
        events_repo=CachedEventRepository(MySQLEventRepository(conn)),
        formatter=formatter,
        conn=conn,
    )

import argparse
import getpass
import logging
import sys

from bustrack.api import ApiClient
from bustrack.config import ApiConfig, data_dir
from bustrack.constants import LOG_FORMAT, RECORDS_FOLDER
from bustrack.errors import BusTrackError, TransitionCancelled
from bustrack.export import export_route_sheet
from bustrack.models import SyncStatus, describe_attendance, describe_route_status
from bustrack.session import RouteSession
from bustrack.storage import (
    JsonFileStore,
    clear_credentials,
    load_token,
    load_user,
    save_credentials,
)

logger = logging.getLogger("bustrack")


def ask_yes_no(question):
    answer = input(f"{question} [y/N]: ").strip().lower()
    return answer in ("y", "yes")


def find_route(api, token, route_id):
    for route in api.fetch_routes(token):
        if str(route.id) == str(route_id):
            return route
    raise SystemExit(f"Route {route_id} not found")


def cmd_login(args, api, store):
    username = args.username or input("Username: ").strip()
    password = getpass.getpass("Password: ")
    token, user = api.login(username, password)
    user = user or {}
    save_credentials(store, token, user)
    role = "driver" if user.get("is_driver") else "parent"
    print(f"Logged in as {user.get('username', username)} ({role})")


def cmd_logout(args, api, store):
    token = load_token(store)
    if token:
        api.logout(token)
    clear_credentials(store)
    print("Logged out")


def cmd_routes(args, api, store):
    user = load_user(store) or {}
    print(f"Welcome, {user.get('username', 'driver')}")
    for route in api.fetch_routes(load_token(store)):
        desc = describe_route_status(route.status)
        print(f"{route.id}\t{desc.label:<12}\t{route.title}\t{route.schedule}")


def print_students(session):
    for student in session.students:
        icon = describe_attendance(student.attendance_status).icon
        marker = "*" if session.book.is_changed(student.id) else " "
        print(f"{marker} {icon} {student.id}\t{student.name}\t{student.group or ''}\t{student.pickup_time or ''}")
    counts = ", ".join(f"{describe_attendance(s).label}: {n}" for s, n in session.book.summary().items())
    print(counts)
    print(f"Route status: {session.status.value} | sync: {session.sync_status.value} "
          f"| unsynced changes: {session.book.pending_count}")


def open_session(args, api, store):
    token = load_token(store)
    route = find_route(api, token, args.route)
    return RouteSession(route, store, api, token=token).open()


def cmd_students(args, api, store):
    print_students(open_session(args, api, store))


def cmd_toggle(args, api, store):
    session = open_session(args, api, store)
    for student_id in args.students:
        change = session.toggle(student_id)
        print(f"{student_id} -> {change.status.value}")
    print_students(session)


def cmd_save(args, api, store):
    session = open_session(args, api, store)
    if not session.book.has_changes():
        print("No changes to save")
        return
    if session.save() == SyncStatus.SYNCED:
        print("Changes saved")
    else:
        print(f"Could not save changes, they stay queued: {session.coordinator.last_error}")
        sys.exit(1)


def cmd_start(args, api, store):
    session = open_session(args, api, store)
    try:
        info = session.start_route(
            confirm=lambda: ask_yes_no("Pending attendance could not be synced. Start the route anyway?")
        )
    except TransitionCancelled as e:
        print(e)
        sys.exit(1)
    print(f"Tracking: {info.to_dict()}")


def cmd_activate(args, api, store):
    info = open_session(args, api, store).activate()
    print(f"Route {info.id} is {info.status.value}")


def cmd_end(args, api, store):
    info = open_session(args, api, store).end_route()
    print(f"Route {info.id} is {info.status.value}")


def cmd_export(args, api, store):
    session = open_session(args, api, store)
    path = export_route_sheet(session.route, session.students, folder=args.folder)
    print(f"Exported to {path}")


def build_parser():
    parser = argparse.ArgumentParser(prog="bustrack", description="School bus route attendance")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login")
    p.add_argument("--username")
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout").set_defaults(func=cmd_logout)
    sub.add_parser("routes").set_defaults(func=cmd_routes)

    for name, func in (
        ("students", cmd_students),
        ("save", cmd_save),
        ("start", cmd_start),
        ("activate", cmd_activate),
        ("end", cmd_end),
    ):
        p = sub.add_parser(name)
        p.add_argument("route")
        p.set_defaults(func=func)

    p = sub.add_parser("toggle")
    p.add_argument("route")
    p.add_argument("students", nargs="+")
    p.set_defaults(func=cmd_toggle)

    p = sub.add_parser("export")
    p.add_argument("route")
    p.add_argument("--folder", default=RECORDS_FOLDER)
    p.set_defaults(func=cmd_export)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    store = JsonFileStore(data_dir())
    api = ApiClient(ApiConfig.from_env())

    if args.command not in ("login", "logout") and not load_token(store):
        print("Not logged in, run `login` first")
        sys.exit(1)

    try:
        args.func(args, api, store)
    except BusTrackError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()

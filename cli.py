import argparse
import json
import sys
from datetime import date

from config.settings import get_settings
from db.connection import get_connection
from db import schema
from db.repos.people_repo import PERSON_COLUMNS, PeopleRepo
from exceptions import SyncError
from models import PersonRecord
from services.dispatch import DispatchPolicy
from services.sync_connector import SyncConnector
from utils.logging_setup import init_logging


def _open_repo(args) -> PeopleRepo:
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    return PeopleRepo(conn)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _summarize(report) -> dict:
    return {
        "assigned": {str(k): v for k, v in report.assigned.items()},
        "pulls": [_future_state(f) for f in report.pulls],
        "pushes": [_future_state(f) for f in report.pushes],
        "failures": [{"record_id": rid, "error": str(exc)} for rid, exc in report.failures],
    }


def _future_state(future) -> str:
    exc = future.exception()
    if exc is not None:
        return f"failed: {exc}"
    return future.result().value


def cmd_bootstrap(args):
    _open_repo(args)
    print("Schema ready")


def cmd_create(args):
    repo = _open_repo(args)
    person = PersonRecord(
        external_id=args.external_id,
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        phone=args.phone,
        birth_date=date.fromisoformat(args.birth_date) if args.birth_date else None,
        mailing_street=args.street,
        mailing_city=args.city,
        mailing_postal_code=args.postal_code,
        mailing_state=args.state,
        mailing_country=args.country,
    )
    record_id = repo.insert(person)
    with SyncConnector(repo) as connector:
        report = DispatchPolicy(connector, repo).on_create([repo.get_by_id(record_id)])
        report.wait()
    _print_json({"record_id": record_id, **_summarize(report)})


def cmd_update(args):
    repo = _open_repo(args)
    for assignment in args.set or []:
        field, sep, value = assignment.partition("=")
        if not sep or field not in PERSON_COLUMNS:
            print(f"Invalid --set value: {assignment}")
            return 2
        repo.update_field(args.id, field, value or None)
    with SyncConnector(repo) as connector:
        report = DispatchPolicy(connector, repo).on_update([repo.get_by_id(args.id)])
        report.wait()
    _print_json({"record_id": args.id, **_summarize(report)})


def cmd_pull(args):
    repo = _open_repo(args)
    with SyncConnector(repo) as connector:
        outcome = connector.pull_and_upsert_now(args.external_id)
    print(f"Pull {args.external_id}: {outcome.value}")


def cmd_push(args):
    repo = _open_repo(args)
    with SyncConnector(repo) as connector:
        outcome = connector.push_and_stamp_update_now(args.id)
    print(f"Push {args.id}: {outcome.value}")


def cmd_report_person(args):
    repo = _open_repo(args)
    if args.id is not None:
        person = repo.get_by_id(args.id)
    else:
        person = repo.get_by_external_id(args.external_id)
        if person is None:
            print("No record found for external id")
            return 1
    _print_json(person.model_dump(mode="json"))


def main(argv=None):
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Person profile sync CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_new = sub.add_parser("create", help="Insert a person and run the create dispatch")
    p_new.add_argument("--external-id", default=None, help="External id (random 0-100 when omitted)")
    p_new.add_argument("--first-name")
    p_new.add_argument("--last-name")
    p_new.add_argument("--email")
    p_new.add_argument("--phone")
    p_new.add_argument("--birth-date", help="YYYY-MM-DD")
    p_new.add_argument("--street")
    p_new.add_argument("--city")
    p_new.add_argument("--postal-code")
    p_new.add_argument("--state")
    p_new.add_argument("--country")
    p_new.set_defaults(func=cmd_create)

    p_upd = sub.add_parser("update", help="Change fields of a person and run the update dispatch")
    p_upd.add_argument("--id", type=int, required=True, help="Local record id")
    p_upd.add_argument("--set", action="append", metavar="FIELD=VALUE", help="Field assignment (repeatable)")
    p_upd.set_defaults(func=cmd_update)

    p_pull = sub.add_parser("pull", help="Fetch one external profile and upsert it")
    p_pull.add_argument("--external-id", required=True)
    p_pull.set_defaults(func=cmd_pull)

    p_push = sub.add_parser("push", help="Push one local record and stamp last sync")
    p_push.add_argument("--id", type=int, required=True)
    p_push.set_defaults(func=cmd_push)

    p_rp = sub.add_parser("report-person", help="Show a stored person as JSON")
    key = p_rp.add_mutually_exclusive_group(required=True)
    key.add_argument("--id", type=int)
    key.add_argument("--external-id")
    p_rp.set_defaults(func=cmd_report_person)

    args = parser.parse_args(argv)
    try:
        return args.func(args) or 0
    except SyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

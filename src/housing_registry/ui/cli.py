from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from housing_registry.app import (
    add_house,
    evict,
    export_residents_file,
    find_residents,
    import_residents_file,
    microdistrict_houses,
    microdistricts,
    register,
)
from housing_registry.config import configure_logging
from housing_registry.domain.errors import DuplicateEntityError, InvalidSubmissionError
from housing_registry.domain.housing import DEFAULT_PAGE_SIZE

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from housing_registry.domain.model import House

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the residential registry")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import residents from a CSV file")
    import_cmd.add_argument("path", help="CSV file whose first line is a header")

    export_cmd = subparsers.add_parser("export", help="Export all residents to a CSV file")
    export_cmd.add_argument("path", help="Destination file (overwritten)")

    house = subparsers.add_parser("house", help="House management commands")
    house_sub = house.add_subparsers(dest="house_command", required=True)
    house_add = house_sub.add_parser("add", help="Create a house with its apartment grid")
    house_add.add_argument("--microdistrict", type=str, required=True, help="Microdistrict name")
    house_add.add_argument("--number", type=str, required=True, help="House number")
    house_add.add_argument("--floors", type=int, required=True, help="Number of floors")

    resident = subparsers.add_parser("resident", help="Resident management commands")
    resident_sub = resident.add_subparsers(dest="resident_command", required=True)
    resident_register = resident_sub.add_parser("register", help="Register a resident")
    resident_register.add_argument("--apartment-id", type=int, required=True)
    resident_register.add_argument("--first-name", type=str, required=True)
    resident_register.add_argument("--last-name", type=str, required=True)
    resident_register.add_argument("--phone", type=str, required=True)
    resident_register.add_argument(
        "--move-in",
        type=str,
        help="ISO-8601 move-in date (defaults to today)",
    )
    resident_evict = resident_sub.add_parser("evict", help="Remove a resident")
    resident_evict.add_argument("resident_id", type=int)

    subparsers.add_parser("microdistricts", help="List known microdistricts")

    show = subparsers.add_parser("show", help="Show houses, apartments and residents")
    show.add_argument("microdistrict", help="Microdistrict name")

    residents = subparsers.add_parser("residents", help="Search residents")
    residents.add_argument("--search", type=str, help="Match first name, last name or phone")
    residents.add_argument("--page", type=int, default=0, help="Zero-based page number")
    residents.add_argument(
        "--page-size",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help="Rows per page, 0 for all (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _print_houses(houses: Sequence[House]) -> None:
    for house in houses:
        floors = house.floors_count if house.floors_count is not None else "?"
        print(f"House {house.house_number} (id={house.id}, floors={floors})")  # noqa: T201
        for floor, apartments in house.apartments_by_floor().items():
            print(f"  Floor {floor}")  # noqa: T201
            for apartment in apartments:
                occupants = ", ".join(r.full_name for r in apartment.residents) or "free"
                print(  # noqa: T201
                    f"    Apartment {apartment.apartment_num} (id={apartment.id}): {occupants}"
                )


def _run(parsed_args: argparse.Namespace) -> int:
    command = parsed_args.command
    if command == "import":
        summary = import_residents_file(parsed_args.path)
        log.info(
            "Import: inserted=%s, skipped=%s, failed=%s",
            summary.inserted,
            summary.skipped,
            summary.failed,
        )
        if summary.abort is not None:
            log.error(summary.abort.message)
            return 1
    elif command == "export":
        export_residents_file(parsed_args.path)
        log.info("Exported residents to %s", parsed_args.path)
    elif command == "house" and parsed_args.house_command == "add":
        house = add_house(parsed_args.microdistrict, parsed_args.number, parsed_args.floors)
        log.info("Created house %s", house.id)
    elif command == "resident" and parsed_args.resident_command == "register":
        move_in = _parse_iso_date(parsed_args.move_in) if parsed_args.move_in else None
        resident = register(
            parsed_args.apartment_id,
            first_name=parsed_args.first_name,
            last_name=parsed_args.last_name,
            phone=parsed_args.phone,
            move_in_date=move_in,
        )
        log.info("Registered resident %s", resident.id)
    elif command == "resident" and parsed_args.resident_command == "evict":
        evict(parsed_args.resident_id)
        log.info("Evicted resident %s", parsed_args.resident_id)
    elif command == "microdistricts":
        for name in microdistricts():
            print(name)  # noqa: T201
    elif command == "show":
        _print_houses(microdistrict_houses(parsed_args.microdistrict))
    elif command == "residents":
        page = find_residents(
            parsed_args.search,
            page=parsed_args.page,
            page_size=parsed_args.page_size,
        )
        for item in page.items:
            print(  # noqa: T201
                f"{item.resident_id}\t{item.last_name} {item.first_name}\t{item.phone}\t"
                f"{item.microdistrict or ''} {item.house_number or ''}"
                f"/{item.apartment_num or ''}"
            )
        print(f"{len(page.items)} of {page.total}")  # noqa: T201
    else:
        raise ValueError(f"Unsupported command: {command}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        exit_code = _run(parsed_args)
    except (ValueError, InvalidSubmissionError, DuplicateEntityError):
        log.exception("Rejected request")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

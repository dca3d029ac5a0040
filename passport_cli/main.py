#!/usr/bin/env python3
"""
Practitioner Passport CLI - Main Entry Point

Usage:
    passport verifications [--mentor ID] [--type T] [--status S]
                                              # Show the review queue
    passport counts [--mentor ID]             # Pending items per source
    passport verify TYPE ID --status STATUS   # Verify or reject one item
    passport assign MENTOR STUDENT            # Assign a student to a mentor
    passport unassign STUDENT                 # Remove a student's mentor
    passport mentees MENTOR                   # List a mentor's students

Works directly against DATABASE_URL using the same services as the HTTP API.
"""

import argparse
import asyncio
import sys
from typing import Callable, List, Optional

from rich.console import Console
from rich.table import Table

from practitioner_passport.core.database import AsyncSessionLocal, close_db, init_db
from practitioner_passport.core.exceptions import PassportError
from practitioner_passport.services.mentor_assignments import MentorAssignmentService
from practitioner_passport.services.verification_aggregator import VerificationAggregator
from practitioner_passport.services.verification_mutator import VerificationMutator

PRIORITY_STYLES = {"High": "red", "Medium": "yellow", "Low": "green"}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="passport",
        description="Practitioner Passport - verification queue and mentor assignments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  passport verifications                         Whole review queue
  passport verifications --mentor <id>           Queue for one mentor's students
  passport verifications --type sessions --status rejected
  passport verify qualification <id> --status verified
  passport verify activity <id> --status rejected --feedback "No evidence"
  passport assign <mentor-id> <student-id> --notes "Autumn cohort"
""",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    list_parser = subparsers.add_parser("verifications", help="Show pending verifications")
    list_parser.add_argument("--mentor", dest="mentor_id", help="Only students assigned to this mentor")
    list_parser.add_argument("--type", "-t", dest="verification_type",
                             help="all, qualifications, sessions, activities, applications or profiles")
    list_parser.add_argument("--status", "-s", help="pending (default), verified or rejected")

    counts_parser = subparsers.add_parser("counts", help="Pending verification counts per source")
    counts_parser.add_argument("--mentor", dest="mentor_id", help="Only students assigned to this mentor")

    verify_parser = subparsers.add_parser("verify", help="Verify or reject one item")
    verify_parser.add_argument("type", help="qualification, session, activity, application, profile or generic")
    verify_parser.add_argument("id", help="Item id")
    verify_parser.add_argument("--status", "-s", required=True, help="verified or rejected")
    verify_parser.add_argument("--feedback", "-f", help="Feedback or rejection reason")
    verify_parser.add_argument("--verifier", help="User id recorded as the verifier")

    assign_parser = subparsers.add_parser("assign", help="Assign a student to a mentor")
    assign_parser.add_argument("mentor_id")
    assign_parser.add_argument("student_id")
    assign_parser.add_argument("--notes", "-n")

    unassign_parser = subparsers.add_parser("unassign", help="Remove a student's mentor")
    unassign_parser.add_argument("student_id")

    mentees_parser = subparsers.add_parser("mentees", help="List students assigned to a mentor")
    mentees_parser.add_argument("mentor_id")

    return parser


def _verification_table(records, title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("Type", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Student")
    table.add_column("Date")
    table.add_column("Priority")
    table.add_column("Status")
    for record in records:
        style = PRIORITY_STYLES.get(record.priority, "white")
        table.add_row(
            record.type,
            record.id,
            record.title or "-",
            record.user or "-",
            record.date.strftime("%Y-%m-%d") if record.date else "-",
            f"[{style}]{record.priority}[/{style}]",
            record.status,
        )
    return table


async def run_command(args: argparse.Namespace, console: Console,
                      session_factory: Optional[Callable] = None) -> int:
    """Execute one parsed command; returns the process exit code"""
    session_factory = session_factory or AsyncSessionLocal

    async with session_factory() as db:
        if args.command == "verifications":
            listing = await VerificationAggregator(db).list_pending_verifications(
                args.mentor_id, verification_type=args.verification_type, status=args.status
            )
            title = f"{(args.status or 'pending').capitalize()} verifications ({listing.status.value})"
            console.print(_verification_table(listing.records, title))
            if listing.is_sample:
                console.print("[yellow]No pending items - showing sample records[/yellow]")
            if listing.failed_sources:
                console.print(f"[yellow]Some data may be missing: {', '.join(listing.failed_sources)}[/yellow]")

        elif args.command == "counts":
            counts = await VerificationAggregator(db).count_pending_verifications(args.mentor_id)
            table = Table(title="Pending verifications")
            table.add_column("Source", style="cyan")
            table.add_column("Pending", justify="right")
            for key in ("qualifications", "sessions", "activities", "applications", "profiles"):
                table.add_row(key, str(counts[key]))
            table.add_row("[bold]total[/bold]", f"[bold]{counts['total']}[/bold]")
            console.print(table)

        elif args.command == "verify":
            result = await VerificationMutator(db).set_verification_status(
                args.id, args.type, args.status, feedback=args.feedback, verifier_id=args.verifier
            )
            console.print(f"[green]✓ {result['message']}[/green]")

        elif args.command == "assign":
            result = await MentorAssignmentService(db).assign(args.mentor_id, args.student_id, args.notes)
            console.print(f"[green]✓ {result['message']}[/green]")
            if result.get("replaced_mentor_id"):
                console.print(f"[dim]Previous mentor: {result['replaced_mentor_id']}[/dim]")

        elif args.command == "unassign":
            result = await MentorAssignmentService(db).unassign(args.student_id)
            console.print(f"[green]✓ {result['message']}[/green]")

        elif args.command == "mentees":
            mentees = await MentorAssignmentService(db).list_students_for_mentor(args.mentor_id)
            table = Table(title=f"Students of mentor {args.mentor_id}")
            table.add_column("Student ID", style="dim")
            table.add_column("Name")
            table.add_column("Email")
            table.add_column("Assigned")
            table.add_column("Notes")
            for mentee in mentees:
                table.add_row(
                    mentee["student_id"],
                    mentee["name"] or "-",
                    mentee["email"] or "-",
                    mentee["assigned_date"].strftime("%Y-%m-%d"),
                    mentee["notes"] or "",
                )
            console.print(table)

    return 0


async def _run(args: argparse.Namespace, console: Console) -> int:
    await init_db()
    try:
        return await run_command(args, console)
    finally:
        await close_db()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console()

    if not args.command:
        parser.print_help()
        return 1

    try:
        return asyncio.run(_run(args, console))
    except PassportError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        return 2 if e.status_code < 500 else 3
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())

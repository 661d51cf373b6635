"""CLI commands for CourseFlow.

Commands:
- import-syllabus: Import a syllabus PDF or text file
- analyze-text: Import syllabus text from a file or stdin
- courses / show: Inspect stored courses and grade projections
- grade / goal: Record grades and goal grades
- delete-course / clear-all: Remove data
- export-calendar: Write .ics files
- serve: Run the Web API
"""

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from courseflow.config.app_config import load_app_config
from courseflow.config.heuristics import load_heuristics
from courseflow.core.calendar_export import (
    generate_ical_for_all_courses,
    generate_ical_for_course,
    safe_filename,
    save_ical_file,
)
from courseflow.core.grades import weighted_average
from courseflow.core.syllabus_importer import (
    ImportResult,
    SyllabusImportError,
    import_syllabus_file,
    import_syllabus_text,
)
from courseflow.db.ledger import GradeLedger
from courseflow.db.models import Course
from courseflow.db.store import JsonFileStore
from courseflow.llm.client import LLMClient, LLMConfig

app = typer.Typer(
    name="courseflow",
    help="Import course syllabi and track grades against a goal.",
    no_args_is_help=True,
)

console = Console()


def _open_ledger() -> GradeLedger:
    """Ledger backed by the configured database file."""
    config = load_app_config()
    return GradeLedger(JsonFileStore(config.ledger.database_path))


def _make_client(provider: str | None, model: str | None) -> LLMClient:
    return LLMClient(LLMConfig.from_app_config(provider), model=model)


def _get_course_or_exit(ledger: GradeLedger, course_id: int) -> Course:
    course = ledger.get_course_by_id(course_id)
    if course is None:
        console.print(f"[red]✗ Course not found: {course_id}[/red]")
        raise typer.Exit(code=1)
    return course


def _fmt_number(value: float | None, suffix: str = "") -> str:
    if value is None:
        return "-"
    return f"{value:.1f}{suffix}" if value != int(value) else f"{int(value)}{suffix}"


def _print_import_result(result: ImportResult) -> None:
    if result.success:
        console.print(f"[green]✓ {result.message}[/green]")
    else:
        console.print(f"[yellow]⚠ {result.message}[/yellow]")

    if result.course is not None:
        console.print(f"  [dim]course_id:[/dim]  {result.course.id}")
        console.print(f"  [dim]name:[/dim]       {result.course.name}")
        console.print(f"  [dim]instructor:[/dim] {result.course.instructor}")

    if not result.success:
        raise typer.Exit(code=1)


@app.command(name="import-syllabus")
def import_syllabus(
    file: str = typer.Argument(..., help="Path to a syllabus PDF or text file"),
    provider: str | None = typer.Option(
        None, "--provider", "-p", help="LLM provider: gemini, openai, lmstudio"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name (overrides config)"),
) -> None:
    """Extract a syllabus with the LLM and store it as a course."""
    file_path = Path(file).expanduser().resolve()
    config = load_app_config()
    ledger = _open_ledger()

    console.print(f"[blue]Analyzing {file_path.name}...[/blue]")

    try:
        result = import_syllabus_file(
            file_path,
            ledger,
            _make_client(provider, model),
            config=config.extraction,
            heuristics=load_heuristics(),
        )
    except FileNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    except SyllabusImportError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        console.print("  Tip: courseflow analyze-text <file> imports pasted syllabus text")
        raise typer.Exit(code=1)

    _print_import_result(result)


@app.command(name="analyze-text")
def analyze_text(
    source: str = typer.Argument(..., help="Text file with the syllabus, or '-' for stdin"),
    provider: str | None = typer.Option(
        None, "--provider", "-p", help="LLM provider: gemini, openai, lmstudio"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name (overrides config)"),
) -> None:
    """Import syllabus text without document extraction."""
    if source == "-":
        text = sys.stdin.read()
    else:
        path = Path(source).expanduser()
        if not path.exists():
            console.print(f"[red]✗ File not found: {path}[/red]")
            raise typer.Exit(code=1)
        text = path.read_text(encoding="utf-8")

    if not text.strip():
        console.print("[red]✗ No text provided[/red]")
        raise typer.Exit(code=1)

    ledger = _open_ledger()
    try:
        result = import_syllabus_text(
            text,
            ledger,
            _make_client(provider, model),
            heuristics=load_heuristics(),
        )
    except SyllabusImportError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    _print_import_result(result)


@app.command()
def courses() -> None:
    """List stored courses."""
    ledger = _open_ledger()
    all_courses = ledger.get_all_courses()

    if not all_courses:
        console.print("[dim]No courses yet. Import one with: courseflow import-syllabus <file>[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Course")
    table.add_column("Instructor")
    table.add_column("Assessments", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Goal", justify="right")

    for course in all_courses:
        table.add_row(
            str(course.id),
            f"[{course.color}]■[/] {course.name}",
            course.instructor,
            str(len(course.assessments)),
            _fmt_number(weighted_average(course.assessments), "%"),
            _fmt_number(course.goal_grade, "%"),
        )

    console.print(table)


@app.command()
def show(course_id: int = typer.Argument(..., help="Course ID")) -> None:
    """Show a course, its assessments and the grade projection."""
    ledger = _open_ledger()
    course = _get_course_or_exit(ledger, course_id)
    summary = ledger.calculate_grade_summary(course_id)
    required = {r.assessment_id: r.required_grade for r in summary.required_grades}

    console.print(f"[bold]{course.name}[/bold]  [dim]({course.instructor})[/dim]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Due")
    table.add_column("Weight", justify="right")
    table.add_column("Grade", justify="right")
    table.add_column("Needed", justify="right")

    for a in course.assessments:
        table.add_row(
            str(a.id),
            a.title,
            a.type,
            a.due_date or "-",
            _fmt_number(a.weight, "%"),
            _fmt_number(a.grade),
            _fmt_number(required.get(a.id)),
        )
    console.print(table)

    console.print(f"  [dim]current grade:[/dim] {_fmt_number(summary.current_grade, '%')}")
    console.print(f"  [dim]goal grade:[/dim]    {_fmt_number(summary.goal_grade, '%')}")
    if summary.goal_infeasible:
        console.print(f"  [red]✗ {summary.message}[/red]")
    elif summary.goal_met:
        console.print(f"  [green]✓ {summary.message}[/green]")
    else:
        console.print(f"  [dim]{summary.message}[/dim]")


@app.command()
def grade(
    course_id: int = typer.Argument(..., help="Course ID"),
    assessment_id: int = typer.Argument(..., help="Assessment ID"),
    value: float | None = typer.Argument(None, help="Grade 0-100"),
    clear: bool = typer.Option(False, "--clear", help="Remove the grade"),
) -> None:
    """Record (or clear) the grade of an assessment."""
    if value is None and not clear:
        console.print("[red]✗ Grade is required (or pass --clear)[/red]")
        raise typer.Exit(code=1)

    ledger = _open_ledger()
    try:
        updated = ledger.update_assessment_grade(course_id, assessment_id, None if clear else value)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if not updated:
        console.print(f"[red]✗ Course or assessment not found: {course_id}/{assessment_id}[/red]")
        raise typer.Exit(code=1)

    action = "cleared" if clear else f"set to {_fmt_number(value)}"
    console.print(f"[green]✓ Grade {action}[/green]")


@app.command()
def goal(
    course_id: int = typer.Argument(..., help="Course ID"),
    value: float | None = typer.Argument(None, help="Goal grade 0-100"),
    clear: bool = typer.Option(False, "--clear", help="Remove the goal grade"),
) -> None:
    """Set (or clear) the goal grade of a course."""
    if value is None and not clear:
        console.print("[red]✗ Goal grade is required (or pass --clear)[/red]")
        raise typer.Exit(code=1)

    ledger = _open_ledger()
    try:
        updated = ledger.update_course_goal_grade(course_id, None if clear else value)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if not updated:
        console.print(f"[red]✗ Course not found: {course_id}[/red]")
        raise typer.Exit(code=1)

    action = "cleared" if clear else f"set to {_fmt_number(value, '%')}"
    console.print(f"[green]✓ Goal grade {action}[/green]")


@app.command(name="delete-course")
def delete_course(
    course_id: int = typer.Argument(..., help="Course ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a course and its assessments."""
    ledger = _open_ledger()
    course = _get_course_or_exit(ledger, course_id)

    if not yes and not typer.confirm(f"Delete '{course.name}'?"):
        raise typer.Abort()

    ledger.delete_course(course_id)
    console.print(f"[green]✓ Deleted {course.name}[/green]")


@app.command(name="clear-all")
def clear_all(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every course and reset ids."""
    if not yes and not typer.confirm("Delete ALL courses?"):
        raise typer.Abort()

    _open_ledger().clear_all_courses()
    console.print("[green]✓ All courses cleared[/green]")


@app.command(name="export-calendar")
def export_calendar(
    course_id: int | None = typer.Argument(None, help="Course ID (all courses if omitted)"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output directory (defaults to config)"
    ),
) -> None:
    """Write an .ics calendar of assessment due dates."""
    config = load_app_config()
    ledger = _open_ledger()
    directory = output or config.ledger.calendar_dir

    if course_id is None:
        content = generate_ical_for_all_courses(ledger.get_all_courses())
        filename = "all_courses_calendar.ics"
    else:
        course = _get_course_or_exit(ledger, course_id)
        content = generate_ical_for_course(course)
        filename = f"{safe_filename(course.name)}_calendar.ics"

    path = save_ical_file(content, filename, directory)
    console.print("[green]✓ Calendar written[/green]")
    console.print(f"  [dim]path:[/dim] {path}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(3000, "--port", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    console.print(f"[blue]CourseFlow API on http://{host}:{port}[/blue]")
    uvicorn.run(
        "courseflow.web.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    app()

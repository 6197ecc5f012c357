"""Command-line interface for the workout insights engine."""

import json
import logging
import sys

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import config
from .models import (
    DataFormatError,
    FitnessLevel,
    WorkoutRequest,
    WorkoutType,
    load_dataset,
    to_dict,
)
from .orchestrator import InsightReport, InsightService, SystemState

console = Console()

RISK_COLORS = {"low": "green", "moderate": "yellow", "high": "red", "critical": "bold red"}
STATE_COLORS = {
    SystemState.OPERATIONAL: "green",
    SystemState.DEGRADED: "yellow",
    SystemState.ERROR: "red",
}


def _load(data_file):
    try:
        return load_dataset(data_file)
    except DataFormatError as e:
        console.print(f"[red]❌ Invalid dataset: {e}[/red]")
        sys.exit(1)


def _print_json(obj):
    click.echo(json.dumps(to_dict(obj), indent=2))


def render_report(report: InsightReport):
    """Render an insight report as rich panels and tables."""
    recs = report.recommendations
    console.print(Panel.fit(
        f"User: {report.user_id}\n"
        f"Confidence: {report.confidence:.0%}\n"
        f"Priority: {recs.priority.value.upper()}",
        title="📊 Workout Insights",
        style="bold blue",
    ))

    risk = report.injury_risk
    color = RISK_COLORS.get(risk.risk_level.value, "white")
    table = Table(title="Injury Risk", box=box.ROUNDED)
    table.add_column("Overall", justify="right")
    table.add_column("Level")
    table.add_column("ACWR", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_row(
        f"{risk.overall_risk:.0f}",
        f"[{color}]{risk.risk_level.value}[/{color}]",
        f"{risk.factors.training_load.acute_chronic_ratio:.2f}",
        f"{risk.confidence:.0%}",
    )
    console.print(table)
    for warning in risk.warnings:
        console.print(f"[yellow]⚠️  {warning.message}[/yellow]")

    progress = report.progress
    table = Table(title="Progress Outlook", box=box.ROUNDED)
    table.add_column("Metric")
    table.add_column("Prediction", justify="right")
    table.add_column("Confidence", justify="right")
    for label, prediction in (
        ("Strength (1RM)", progress.strength),
        ("Volume", progress.volume),
        ("Body weight change", progress.weight_loss),
    ):
        if prediction is not None:
            table.add_row(label, f"{prediction.value:.1f}", f"{prediction.confidence:.0%}")
    for weeks, value in sorted(progress.strength_projection.items()):
        table.add_row(f"Projected 1RM in {weeks} wk", f"{value:.1f}", "")
    console.print(table)

    windows = report.training_windows
    table = Table(title="Training Windows", box=box.ROUNDED)
    table.add_column("Window")
    table.add_column("Time")
    table.add_column("Score", justify="right")
    table.add_column("Duration", justify="right")
    rows = [("Primary", windows.primary)]
    if windows.secondary is not None:
        rows.append(("Secondary", windows.secondary))
    rows.extend(("Avoid", w) for w in windows.avoid)
    for label, window in rows:
        table.add_row(
            label,
            f"{window.time_of_day:02d}:00",
            f"{window.optimality_score:.0f}",
            f"{window.duration} min",
        )
    console.print(table)

    plateaus = report.plateaus
    console.print(
        f"\n[bold]Plateau risk:[/bold] {plateaus.overall_risk:.0f}"
        + (f" (estimated {plateaus.time_to_plateau_estimate} days to plateau)"
           if plateaus.time_to_plateau_estimate else "")
    )
    for detection in plateaus.strength_plateaus + plateaus.volume_plateaus:
        console.print(f"  • {detection.type} plateau, {detection.severity.value} severity")

    lines = []
    for title, items in (
        ("Immediate", recs.immediate),
        ("Short term", recs.short_term),
        ("Long term", recs.long_term),
    ):
        lines.extend(f"[bold]{title}:[/bold] {item}" for item in items)
    if lines:
        console.print(Panel("\n".join(lines), title="💡 Recommendations", border_style="green"))


def render_workout(workout):
    """Render a generated workout."""
    console.print(Panel.fit(
        f"{workout.name}\n"
        f"Duration: {workout.estimated_duration} min | "
        f"Intensity: {workout.target_intensity:.1f}/10 | "
        f"Confidence: {workout.confidence:.0%}",
        title="🏋️ Generated Workout",
        style="bold blue",
    ))

    for title, items in (("Warm-up", workout.warmup), ("Main", workout.exercises), ("Cool-down", workout.cooldown)):
        if not items:
            continue
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Exercise")
        table.add_column("Sets", justify="right")
        table.add_column("Reps")
        table.add_column("RPE", justify="right")
        table.add_column("Rest", justify="right")
        table.add_column("Notes")
        for ex in items:
            table.add_row(
                ex.exercise.name,
                str(ex.target_sets),
                ex.target_reps,
                f"{ex.target_rpe:.1f}",
                f"{ex.rest_time}s",
                ex.notes or "",
            )
        console.print(table)

    adaptations = workout.adaptations
    notes = (
        adaptations.readiness_adjustments
        + adaptations.injury_prevention
        + adaptations.equipment_substitutions
        + adaptations.progressive_overload
    )
    for note in notes:
        console.print(f"  • {note}")


@click.group()
def cli():
    """Workout insights: progress, injury risk, plateaus and workout generation."""
    logging.basicConfig(level=config.LOG_LEVEL)


@cli.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--user-id", default="default", help="User ID for the report")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def analyze(data_file, user_id, as_json):
    """Analyze a user's workouts and daily metrics."""
    dataset = _load(data_file)
    service = InsightService()
    report = service.analyze_user_sync(user_id, dataset.workouts, dataset.metrics, dataset.exercises)

    if as_json:
        _print_json(report)
    else:
        render_report(report)


@cli.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--type", "workout_type", required=True,
              type=click.Choice([t.value for t in WorkoutType]), help="Workout type")
@click.option("--duration", required=True, type=click.IntRange(10, 240), help="Target duration in minutes")
@click.option("--equipment", multiple=True, help="Available equipment (repeatable)")
@click.option("--muscle", multiple=True, help="Target muscle group (repeatable)")
@click.option("--exclude", multiple=True, help="Exercise ID to exclude (repeatable)")
@click.option("--level", default=FitnessLevel.INTERMEDIATE.value,
              type=click.Choice([level.value for level in FitnessLevel]), help="Fitness level")
@click.option("--readiness", type=click.FloatRange(0, 100), help="Override readiness score (0-100)")
@click.option("--user-id", default="default", help="User ID for the workout")
@click.option("--json", "as_json", is_flag=True, help="Print the workout as JSON")
def generate(data_file, workout_type, duration, equipment, muscle, exclude, level, readiness, user_id, as_json):
    """Generate an adapted workout from a dataset's exercise catalog."""
    dataset = _load(data_file)
    if not dataset.exercises:
        console.print("[yellow]⚠️  Dataset has no exercise catalog, only warm-up and cool-down will be generated[/yellow]")

    request = WorkoutRequest(
        user_id=user_id,
        workout_type=WorkoutType(workout_type),
        target_duration=duration,
        available_equipment=list(equipment),
        target_muscle_groups=list(muscle) or None,
        exclude_exercises=list(exclude) or None,
        fitness_level=FitnessLevel(level),
        current_readiness=readiness,
    )
    service = InsightService()
    workout = service.generate_workout(request, dataset.exercises, dataset.metrics, dataset.workouts)

    if as_json:
        _print_json(workout)
    else:
        render_workout(workout)


@cli.command()
def health():
    """Check that every analysis subsystem is operational."""
    status = InsightService().health_check_sync()

    table = Table(title="System Health", box=box.ROUNDED)
    table.add_column("Subsystem")
    table.add_column("State")
    for name in ("progress", "injury_risk", "training_windows", "plateau_detection", "workout_generation"):
        state = getattr(status, name)
        color = STATE_COLORS[state]
        table.add_row(name.replace("_", " ").title(), f"[{color}]{state.value}[/{color}]")
    console.print(table)
    console.print(f"Checked at {status.last_health_check.strftime('%Y-%m-%d %H:%M:%S')} UTC")

    if not status.healthy:
        sys.exit(1)


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")


if __name__ == "__main__":
    main()

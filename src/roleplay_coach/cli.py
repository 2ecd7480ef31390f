from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from roleplay_coach.data_models import MAX_STARS, Complete, ConversationAttempt, EvaluationResult
from roleplay_coach.dialogue import PhraseSelector
from roleplay_coach.errors import RoleplayCoachError
from roleplay_coach.system import TrainingSystem
from roleplay_coach.utils.logging import bind_session, clear_session, get_logger

app = typer.Typer(help="Practice workplace conversations with scripted characters and get scored.")
console = Console()
log = get_logger(__name__)

candidate_paths = [Path.cwd() / ".env"]
module_env = Path(__file__).resolve().parents[2] / ".env"
if module_env not in candidate_paths:
    candidate_paths.append(module_env)
for env_path in candidate_paths:
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        break


def _load_system(config: Optional[Path], seed: Optional[int] = None) -> TrainingSystem:
    """Instantiate `TrainingSystem`, pinning phrase variation when a seed is given."""
    phrases = PhraseSelector(seed) if seed is not None else None
    try:
        return TrainingSystem.from_config(config, phrases=phrases)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Could not load configuration:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def _stars(value: float) -> str:
    full = int(value)
    half = "½" if value - full >= 0.5 else ""
    empty = int(MAX_STARS - value)
    return "★" * full + half + "☆" * empty


def _render_result(result: EvaluationResult) -> None:
    console.print(f"\n[bold]Result[/bold] {_stars(result.stars)} ({result.stars:g}/{MAX_STARS:g})")
    console.print(result.feedback)
    if result.summary_feedback:
        console.print(f"[dim]{result.summary_feedback}[/dim]")
    details = result.detailed_feedback
    if details.missing_required:
        console.print(f"Missing: {', '.join(details.missing_required)}")
    if details.bonus_found:
        console.print(f"Bonus: {', '.join(details.bonus_found)}")
    if details.forbidden_found:
        console.print(f"[red]Avoid:[/red] {', '.join(details.forbidden_found)}")
    for hint in details.specific_hints or []:
        console.print(f"[yellow]Hint:[/yellow] {hint}")


@app.command()
def scenarios(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """List the scenarios in the catalog with the player's best score for each."""
    system = _load_system(config)
    table = Table(title="Scenarios")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Character")
    table.add_column("Best")
    for scenario in system.catalog:
        progress = system.progress_tracker.scenario_progress(scenario.id)
        best = _stars(progress.best_score) if progress else "-"
        table.add_row(
            scenario.id,
            scenario.title,
            f"{scenario.character.avatar} {scenario.character.name}",
            best,
        )
    console.print(table)


@app.command()
def play(
    scenario_id: str = typer.Argument(..., help="Scenario to play, e.g. 'volvo'."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
    seed: Optional[int] = typer.Option(None, help="Seed for follow-up phrasing."),
    no_delay: bool = typer.Option(False, "--no-delay", help="Skip the pauses between lines."),
):
    """
    Play a scenario turn by turn in the terminal.

    Shows the briefing, then loops `TrainingSystem.respond` until the engine completes the
    attempt. The finished transcript is scored once via `TrainingSystem.finish` and the
    player's progress is saved. An empty line abandons the call and scores what was said;
    hanging up before the first answer records nothing.
    """
    system = _load_system(config, seed)
    try:
        attempt = system.start(scenario_id)
    except RoleplayCoachError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    bind_session(scenario=attempt.scenario.id, seed=seed)
    try:
        result = _converse(system, attempt, no_delay)
    finally:
        clear_session()
    _render_result(result)


def _converse(
    system: TrainingSystem, attempt: ConversationAttempt, no_delay: bool
) -> EvaluationResult:
    """Run the turn loop, then score the attempt once."""
    scenario = attempt.scenario
    character = scenario.character
    console.print(f"[bold]{scenario.title}[/bold]")
    console.print(f"[dim]{scenario.briefing}[/dim]\n")
    if scenario.intro:
        console.print(scenario.intro)
    console.print(f"{character.avatar} [bold]{character.name}:[/bold] {scenario.opening_question}")

    while not attempt.complete:
        utterance = typer.prompt("You", default="", show_default=False)
        if not utterance.strip():
            console.print("[dim]Call ended.[/dim]")
            break
        turn = system.respond(attempt, utterance)
        if not no_delay:
            time.sleep(turn.action.delay_seconds)
        if isinstance(turn.action, Complete):
            if turn.action.closing_line:
                console.print(
                    f"{character.avatar} [bold]{character.name}:[/bold] {turn.action.closing_line}"
                )
        else:
            console.print(f"{character.avatar} [bold]{character.name}:[/bold] {turn.action.text}")

    result = system.finish(attempt)
    log.info(
        "attempt_finished",
        stars=result.stars,
        reason=attempt.completion_reason.value if attempt.completion_reason else "abandoned",
        turns=len(attempt.user_turns()),
    )
    return result


@app.command()
def evaluate(
    scenario_id: str = typer.Argument(..., help="Scenario whose rubric to apply."),
    text: str = typer.Argument(..., help="Answer to score."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Score a single answer against a scenario rubric without recording progress."""
    system = _load_system(config)
    try:
        result = system.evaluate_text(scenario_id, text)
    except RoleplayCoachError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _render_result(result)


@app.command()
def progress(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """Show level, XP and per-scenario best scores."""
    system = _load_system(config)
    tracker = system.progress_tracker
    state = system.progress()
    console.print(f"[bold]{state.current_level.value} level[/bold] · {state.total_xp} XP")
    console.print(f"Total stars: {tracker.total_stars():g}")
    console.print(f"Scenarios completed: {len(state.completed_scenarios)} of {len(system.catalog)}")
    remaining = tracker.stars_to_next_level()
    if remaining is not None:
        console.print(f"Stars to next level: {remaining:g}")
    for scenario in system.catalog:
        record = tracker.scenario_progress(scenario.id)
        if record is None:
            console.print(f"- {scenario.title}: not played yet")
        else:
            console.print(
                f"- {scenario.title}: {_stars(record.best_score)} after {record.attempts} attempt(s)"
            )


@app.command()
def reset(
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
):
    """Erase all saved progress."""
    if not yes:
        typer.confirm("Reset all progress?", abort=True)
    system = _load_system(config)
    system.reset_progress()
    console.print("Progress reset.")


if __name__ == "__main__":
    app()

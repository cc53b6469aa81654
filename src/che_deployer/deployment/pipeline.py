"""Sequential task pipeline.

A pipeline is a static, ordered list of ``Step`` objects. Steps run one at a
time in declaration order against a single ``PipelineContext``; the first
exception aborts the run and propagates to the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from loguru import logger
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn


@dataclass
class PipelineContext:
    """Values produced by one step and consumed by a later one.

    Attributes:
        tls_email: Contact email read from the TLS secret
    """

    tls_email: str | None = None


def _always() -> bool:
    return True


@dataclass
class Step:
    """A named unit of work in a pipeline.

    Attributes:
        title: Display title, annotated with a status suffix after running
        action: Callable receiving the shared context and the step itself
        enabled: Predicate deciding whether the step runs at all
    """

    title: str
    action: Callable[[PipelineContext, Step], None]
    enabled: Callable[[], bool] = field(default=_always)

    def annotate(self, suffix: str) -> None:
        """Append a status suffix to the title (e.g. ``"done."``)."""
        self.title = f"{self.title}...{suffix}"


class TaskPipeline:
    """Runs steps strictly in order, aborting on the first failure."""

    def __init__(self, steps: Sequence[Step], console: Console | None = None) -> None:
        """Initialize the pipeline.

        Args:
            steps: Ordered steps to execute
            console: Rich console used to render progress
        """
        self.steps = list(steps)
        self.console = console or Console()

    def _create_progress(self) -> Progress:
        return Progress(
            SpinnerColumn(finished_text=""),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
        )

    def run(self, context: PipelineContext | None = None) -> PipelineContext:
        """Execute every enabled step and return the shared context.

        Raises:
            Exception: Whatever the failing step raised; later steps never run
        """
        context = context if context is not None else PipelineContext()

        with self._create_progress() as progress:
            for step in self.steps:
                if not step.enabled():
                    logger.debug(f"Skipping disabled step: {step.title}")
                    continue

                task_id = progress.add_task(step.title, total=1)
                logger.info(f"Starting step: {step.title}")
                try:
                    step.action(context, step)
                except Exception:
                    progress.update(
                        task_id, description=f"[red]✗ {step.title}[/red]", completed=1
                    )
                    logger.error(f"Step failed: {step.title}")
                    raise
                progress.update(
                    task_id, description=f"[green]✓[/green] {step.title}", completed=1
                )
                logger.info(f"Finished step: {step.title}")

        return context

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..errors import ScenarioError
from .models import NavigateAction, Scenario

MIN_DIMENSION = 100
MAX_DIMENSION = 3840


@dataclass
class ValidationResult:
    """Outcome of the logical checks that the schema cannot express."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _check_dimension(label: str, value: int, errors: List[str]) -> None:
    if value < MIN_DIMENSION or value > MAX_DIMENSION:
        errors.append(
            f"{label} {value} is out of range (must be {MIN_DIMENSION}-{MAX_DIMENSION})"
        )


def validate_scenario(scenario: Scenario) -> ValidationResult:
    """Check the logical consistency of a parsed scenario."""
    result = ValidationResult()

    first_step = scenario.steps[0]
    if not any(isinstance(a, NavigateAction) for a in first_step.actions):
        result.errors.append('First step must contain a "navigate" action to open a page')

    for i, step in enumerate(scenario.steps):
        step_label = f'"{step.name}"' if step.name else f"#{i + 1}"
        for j, action in enumerate(step.actions):
            selector = getattr(action, "selector", None)
            if selector is not None and not selector.strip():
                result.errors.append(
                    f"Step {step_label}, action #{j + 1} ({action.action}): "
                    "selector must not be empty"
                )

    background = scenario.effects.background
    if background.enabled and background.type == "image" and not Path(background.value).is_file():
        result.errors.append(f"Background image not found: {background.value}")

    _check_dimension("Viewport width", scenario.viewport.width, result.errors)
    _check_dimension("Viewport height", scenario.viewport.height, result.errors)
    _check_dimension("Output width", scenario.output.width, result.errors)
    _check_dimension("Output height", scenario.output.height, result.errors)

    output = scenario.output
    if output.fps > 30:
        result.warnings.append(
            f"FPS is set to {output.fps:g}. High FPS may produce very large files."
        )
    if output.format == "gif" and output.quality > 90:
        result.warnings.append(
            "GIF quality above 90 has diminishing returns and increases file size significantly."
        )
    if (scenario.viewport.width, scenario.viewport.height) != (output.width, output.height):
        result.warnings.append(
            "Viewport dimensions differ from output dimensions. Output will be scaled."
        )
    return result


def ensure_valid(scenario: Scenario) -> ValidationResult:
    """Validate and raise ScenarioError when any error was found."""
    result = validate_scenario(scenario)
    if not result.valid:
        raise ScenarioError("Scenario is not valid", result.errors)
    return result

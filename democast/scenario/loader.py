from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from ..errors import ScenarioError
from .models import NavigateAction, Scenario

logger = logging.getLogger(__name__)

_URL_SCHEMES = ("http://", "https://", "file://", "about:", "data:")


def parse_scenario(text: str) -> Scenario:
    """Parse YAML text into a validated Scenario.

    Raises:
        ScenarioError: on YAML syntax errors or schema violations, with one
            issue per offending field.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ScenarioError(f"YAML parse error: {exc}") from exc

    if not isinstance(raw, dict):
        raise ScenarioError("Scenario must be a YAML mapping")

    try:
        return Scenario.model_validate(raw)
    except ValidationError as exc:
        issues = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            issues.append(f"{location}: {error['msg']}" if location else error["msg"])
        raise ScenarioError("Scenario validation failed", issues) from exc


def load_scenario(path: Union[str, Path]) -> Scenario:
    """Read and parse a scenario file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ScenarioError(f"Failed to read scenario file {str(path)!r}: {exc}") from exc
    scenario = parse_scenario(text)
    logger.debug("Loaded scenario %r from %s", scenario.name, path)
    return scenario


def resolve_relative_urls(scenario: Scenario, base_dir: Union[str, Path]) -> Scenario:
    """Turn bare navigate targets into file:// URLs relative to ``base_dir``."""
    base = Path(base_dir).resolve()
    for step in scenario.steps:
        for action in step.actions:
            if isinstance(action, NavigateAction) and not action.url.startswith(_URL_SCHEMES):
                action.url = (base / action.url).resolve().as_uri()
    return scenario

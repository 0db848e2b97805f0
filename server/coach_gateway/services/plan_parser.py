"""Parse-then-validate for model output.

Model text is never coerced into a plan: it either validates against the
schema or the parse fails with the raw text attached.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..errors import ParseError
from ..models.plan import WeeklyPlan

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_json_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """Decode a JSON object from model text, raising ParseError otherwise."""
    cleaned = strip_json_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Model output is not valid JSON: {exc.msg}", raw_text=text) from exc
    if not isinstance(data, dict):
        raise ParseError(f"Model output is a JSON {type(data).__name__}, expected an object", raw_text=text)
    return data


@dataclass(frozen=True)
class PlanParse:
    plan: WeeklyPlan | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.plan is not None

    def unwrap(self) -> WeeklyPlan:
        if self.plan is None:
            raise self.error or ParseError("No plan parsed")
        return self.plan


def parse_plan(text: str, season: str) -> PlanParse:
    """Parse model text into a WeeklyPlan for ``season``."""
    try:
        data = parse_json_object(text)
    except ParseError as exc:
        return PlanParse(error=exc)

    # The model only owns the week; the season is ours
    data.pop("modificationNote", None)
    data["season"] = season
    try:
        return PlanParse(plan=WeeklyPlan.model_validate(data))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'plan'}: {err['msg']}" for err in exc.errors()[:5]
        )
        return PlanParse(error=ParseError(f"Model output does not match the plan schema: {problems}", raw_text=text))

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .error_handling import InputValidationError, ResponseParseError

SECTION_KEYS = ("title", "abstract", "methodology", "results", "references")


class SintaLevel(Enum):
    SINTA_1 = "SINTA 1"
    SINTA_2 = "SINTA 2"
    SINTA_3 = "SINTA 3"
    SINTA_4 = "SINTA 4"
    SINTA_5 = "SINTA 5"
    SINTA_6 = "SINTA 6"

    @property
    def rank(self) -> int:
        return int(self.value.split()[-1])

    @classmethod
    def parse(cls, value: Any) -> 'SintaLevel':
        """Accept "SINTA 2", "sinta2", "Sinta-2" or a bare 2"""
        if isinstance(value, bool):
            raise ResponseParseError(f"Invalid SINTA level: {value!r}")
        if isinstance(value, int):
            text = str(value)
        elif isinstance(value, str):
            text = value
        else:
            raise ResponseParseError(f"Invalid SINTA level: {value!r}")

        match = re.fullmatch(r"\s*(?:sinta[\s\-_]*)?([1-6])\s*", text, re.IGNORECASE)
        if not match:
            raise ResponseParseError(f"Invalid SINTA level: {value!r}")
        return cls(f"SINTA {match.group(1)}")


class ChecklistStatus(Enum):
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"


def clamp_score(value: Any, field_name: str) -> int:
    """Round a model-supplied score into [0, 100]; reject anything non-numeric"""
    if isinstance(value, bool):
        raise ResponseParseError(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            raise ResponseParseError(f"{field_name} must be numeric, got {value!r}")
    if not isinstance(value, (int, float)) or math.isnan(value):
        raise ResponseParseError(f"{field_name} must be numeric, got {value!r}")
    if math.isinf(value):
        return 100 if value > 0 else 0
    return max(0, min(100, int(round(value))))


def _string_list(data: Dict, key: str) -> Tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ResponseParseError(f"'{key}' must be a list")
    if not all(isinstance(item, str) for item in value):
        raise ResponseParseError(f"'{key}' must contain only strings")
    return tuple(value)


@dataclass(frozen=True)
class AnalysisResult:
    level: SintaLevel
    publishability_score: int
    completeness: int
    section_analysis: Mapping[str, str]
    weaknesses: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.level, SintaLevel):
            raise InputValidationError(f"Unknown SINTA level: {self.level!r}")
        for name in ("publishability_score", "completeness"):
            try:
                object.__setattr__(self, name, clamp_score(getattr(self, name), name))
            except ResponseParseError as e:
                raise InputValidationError(e.message) from e

        sections = dict(self.section_analysis)
        missing = [key for key in SECTION_KEYS if key not in sections]
        if missing:
            raise InputValidationError(f"section_analysis missing sections: {', '.join(missing)}")
        object.__setattr__(self, "weaknesses", tuple(self.weaknesses))
        object.__setattr__(self, "suggestions", tuple(self.suggestions))
        object.__setattr__(self, "section_analysis", MappingProxyType(sections))

    @classmethod
    def from_dict(cls, data: Dict) -> 'AnalysisResult':
        """Decode the JSON object the model returns for an analysis request"""
        if not isinstance(data, dict):
            raise ResponseParseError("Analysis payload must be a JSON object")

        for key in ("sintaLevel", "publishabilityScore", "completeness", "detailedAnalysis"):
            if key not in data:
                raise ResponseParseError(f"Analysis payload missing '{key}'")

        details = data["detailedAnalysis"]
        if not isinstance(details, dict):
            raise ResponseParseError("'detailedAnalysis' must be an object")
        missing = [key for key in SECTION_KEYS if key not in details]
        if missing:
            raise ResponseParseError(f"'detailedAnalysis' missing sections: {', '.join(missing)}")
        not_text = [key for key in SECTION_KEYS if not isinstance(details[key], str)]
        if not_text:
            raise ResponseParseError(f"'detailedAnalysis' sections must be strings: {', '.join(not_text)}")

        return cls(
            level=SintaLevel.parse(data["sintaLevel"]),
            publishability_score=clamp_score(data["publishabilityScore"], "publishabilityScore"),
            completeness=clamp_score(data["completeness"], "completeness"),
            weaknesses=_string_list(data, "weaknesses"),
            suggestions=_string_list(data, "suggestions"),
            section_analysis={key: details[key] for key in SECTION_KEYS},
        )

    def to_dict(self) -> Dict:
        return {
            "sintaLevel": self.level.value,
            "publishabilityScore": self.publishability_score,
            "completeness": self.completeness,
            "weaknesses": list(self.weaknesses),
            "suggestions": list(self.suggestions),
            "detailedAnalysis": {key: self.section_analysis[key] for key in SECTION_KEYS},
        }

    def summary(self) -> str:
        """One-line digest used to greet the reviewer chat"""
        return (
            f"Predicted level: {self.level.value}. "
            f"Publishability {self.publishability_score}/100, completeness {self.completeness}/100."
        )


@dataclass(frozen=True)
class ChecklistItem:
    name: str
    status: ChecklistStatus
    details: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> 'ChecklistItem':
        if not isinstance(data, dict):
            raise ResponseParseError("Checklist entry must be an object")
        try:
            status = ChecklistStatus(str(data.get("status", "")).strip().lower())
        except ValueError:
            raise ResponseParseError(f"Invalid checklist status: {data.get('status')!r}")
        name = data.get("item")
        if not isinstance(name, str) or not name.strip():
            raise ResponseParseError(f"Checklist entry needs a requirement name, got {name!r}")
        return cls(
            name=name.strip(),
            status=status,
            details=str(data.get("details", "")),
        )

    def to_dict(self) -> Dict:
        return {"item": self.name, "status": self.status.value, "details": self.details}


@dataclass(frozen=True)
class ChecklistResult:
    passed_count: int
    total_count: int
    items: Tuple[ChecklistItem, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    @classmethod
    def from_dict(cls, data: Dict, expected_total: int) -> 'ChecklistResult':
        if not isinstance(data, dict):
            raise ResponseParseError("Checklist payload must be a JSON object")

        passed = data.get("passed")
        total = data.get("total")
        for key, value in (("passed", passed), ("total", total)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ResponseParseError(f"Checklist '{key}' must be an integer, got {value!r}")
        if total != expected_total:
            raise ResponseParseError(f"Checklist total must be {expected_total}, got {total}")
        if not 0 <= passed <= total:
            raise ResponseParseError(f"Checklist passed count {passed} outside 0..{total}")

        entries = data.get("checklist", [])
        if not isinstance(entries, list):
            raise ResponseParseError("'checklist' must be a list")

        return cls(
            passed_count=passed,
            total_count=total,
            items=[ChecklistItem.from_dict(entry) for entry in entries],
        )

    def to_dict(self) -> Dict:
        return {
            "passed": self.passed_count,
            "total": self.total_count,
            "checklist": [item.to_dict() for item in self.items],
        }


class Speaker(Enum):
    REQUESTER = "user"
    RESPONDER = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    speaker: Speaker
    text: str
    created_at: datetime = field(default_factory=datetime.now)
    synthetic: bool = False

    def __post_init__(self):
        if not isinstance(self.speaker, Speaker):
            raise InputValidationError(f"Unknown speaker: {self.speaker!r}")
        if not isinstance(self.text, str) or not self.text.strip():
            raise InputValidationError("Conversation turn text must not be empty")

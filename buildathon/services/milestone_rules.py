"""Milestone progression rules.

Holds the prerequisite graph between milestone types and the per-type payload
checks. Everything here is a pure function of its arguments: no database, no
logging. The submission service sequences these checks before persisting.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Literal, Mapping, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from buildathon.models.milestone import PAYLOAD_FIELDS, MilestoneType

KARMA_PROJECT_PREFIX = "https://www.karmahq.xyz/project/"

PREREQUISITES: Mapping[MilestoneType, Optional[MilestoneType]] = MappingProxyType(
    {
        MilestoneType.REGISTRATION: None,
        MilestoneType.TESTNET: MilestoneType.REGISTRATION,
        MilestoneType.KARMA_GAP: MilestoneType.TESTNET,
        MilestoneType.MAINNET: MilestoneType.KARMA_GAP,
        # Optional, but still only after Mainnet.
        MilestoneType.FARCASTER: MilestoneType.MAINNET,
        # Farcaster is not required for the final submission.
        MilestoneType.FINAL_SUBMISSION: MilestoneType.MAINNET,
    }
)

LABELS: Mapping[MilestoneType, str] = MappingProxyType(
    {
        MilestoneType.REGISTRATION: "Registration",
        MilestoneType.TESTNET: "Testnet",
        MilestoneType.KARMA_GAP: "Karma Gap",
        MilestoneType.MAINNET: "Mainnet",
        MilestoneType.FARCASTER: "Farcaster",
        MilestoneType.FINAL_SUBMISSION: "Final submission",
    }
)

OPTIONAL_MILESTONES = frozenset({MilestoneType.FARCASTER})

_EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_ZERO_ADDRESS_RE = re.compile(r"^0x0{40}$")
_URL_ADAPTER = TypeAdapter(AnyUrl)

ValidatedFields = dict[str, Optional[str]]


@dataclass(frozen=True)
class UnlockResult:
    unlocked: bool
    missing: Optional[MilestoneType] = None

    @property
    def reason(self) -> Optional[str]:
        """Human name of the prerequisite still to complete, if any."""

        return LABELS[self.missing] if self.missing is not None else None


@dataclass(frozen=True)
class FieldError:
    field: str
    kind: Literal["missing", "malformed"]
    message: str


@dataclass(frozen=True)
class MilestoneProgress:
    milestone_type: MilestoneType
    label: str
    completed: bool
    unlocked: bool
    optional: bool
    blocked_by: Optional[str]


def parse_milestone_type(value: Any) -> Optional[MilestoneType]:
    """Map a slug (``karma-gap``) or member name (``KARMA_GAP``) to a type."""

    if isinstance(value, MilestoneType):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return MilestoneType(text.lower())
    except ValueError:
        pass
    return MilestoneType.__members__.get(text.upper())


def is_unlocked(requested: MilestoneType, completed: Iterable[MilestoneType]) -> UnlockResult:
    """Return whether ``requested`` may be submitted given the completed types."""

    prerequisite = PREREQUISITES[requested]
    if prerequisite is None or prerequisite in set(completed):
        return UnlockResult(unlocked=True)
    return UnlockResult(unlocked=False, missing=prerequisite)


def milestone_progress(completed: Iterable[MilestoneType]) -> list[MilestoneProgress]:
    """Status of every milestone type, in progression order."""

    done = set(completed)
    rows = []
    for milestone_type in MilestoneType:
        gate = is_unlocked(milestone_type, done)
        rows.append(
            MilestoneProgress(
                milestone_type=milestone_type,
                label=LABELS[milestone_type],
                completed=milestone_type in done,
                unlocked=gate.unlocked,
                optional=milestone_type in OPTIONAL_MILESTONES,
                blocked_by=gate.reason,
            )
        )
    return rows


# --- Format predicates ---------------------------------------------------


def is_valid_contract_address(value: Any) -> bool:
    """EVM address (``0x`` + 40 hex chars), excluding the zero address."""

    if not isinstance(value, str):
        return False
    text = value.strip()
    return bool(_EVM_ADDRESS_RE.match(text)) and not _ZERO_ADDRESS_RE.match(text)


def is_valid_karma_project_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    text = value.strip()
    return text.startswith(KARMA_PROJECT_PREFIX) and len(text) > len(KARMA_PROJECT_PREFIX)


def is_absolute_url(value: Any) -> bool:
    """True for a syntactically valid URL with both a scheme and a host."""

    if not isinstance(value, str) or not value.strip():
        return False
    try:
        url = _URL_ADAPTER.validate_python(value.strip())
    except ValidationError:
        return False
    return bool(url.host)


# --- Payload validation --------------------------------------------------


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _check_contract_address(fields: ValidatedFields, network: str) -> Optional[FieldError]:
    value = fields.get("contract_address")
    if value is None:
        return FieldError("contract_address", "missing", f"A {network} contract address is required.")
    if not is_valid_contract_address(value):
        return FieldError(
            "contract_address",
            "malformed",
            f"Please provide a valid Celo {network} contract address (0x + 40 hex characters).",
        )
    return None


def _check_karma_link(fields: ValidatedFields, *, required: bool) -> Optional[FieldError]:
    value = fields.get("karma_gap_link")
    if value is None:
        if required:
            return FieldError("karma_gap_link", "missing", "A Karma Gap project link is required.")
        return None
    if not is_valid_karma_project_url(value):
        return FieldError(
            "karma_gap_link", "malformed", f"Karma Gap link must start with {KARMA_PROJECT_PREFIX}"
        )
    return None


def _check_url(fields: ValidatedFields, field: str, label: str) -> Optional[FieldError]:
    value = fields.get(field)
    if value is None:
        return FieldError(field, "missing", f"{label} is required.")
    if not is_absolute_url(value):
        return FieldError(field, "malformed", f"{label} must be a valid URL.")
    return None


def validate_payload(
    milestone_type: MilestoneType, payload: Mapping[str, Any]
) -> tuple[Optional[ValidatedFields], Optional[FieldError]]:
    """Check the fields required by ``milestone_type``.

    Returns ``(fields, None)`` on success, with every payload column stripped
    and empty values normalised to ``None``, or ``(None, error)`` for the first
    failing field.
    """

    fields: ValidatedFields = {name: _clean(payload.get(name)) for name in PAYLOAD_FIELDS}

    checks: list[Optional[FieldError]]
    if milestone_type in (MilestoneType.TESTNET, MilestoneType.MAINNET):
        checks = [_check_contract_address(fields, milestone_type.value)]
    elif milestone_type is MilestoneType.FARCASTER:
        checks = [_check_url(fields, "farcaster_link", "Farcaster link")]
    elif milestone_type is MilestoneType.FINAL_SUBMISSION:
        checks = [
            _check_url(fields, "slides_link", "Slides link"),
            _check_url(fields, "pitch_deck_link", "Pitch deck link"),
        ]
    else:
        checks = []

    # A Karma Gap link supplied alongside any milestone must still point at Karma.
    checks.append(_check_karma_link(fields, required=milestone_type is MilestoneType.KARMA_GAP))

    for error in checks:
        if error is not None:
            return None, error
    return fields, None


__all__ = [
    "KARMA_PROJECT_PREFIX",
    "LABELS",
    "OPTIONAL_MILESTONES",
    "PREREQUISITES",
    "FieldError",
    "MilestoneProgress",
    "UnlockResult",
    "ValidatedFields",
    "is_absolute_url",
    "is_unlocked",
    "is_valid_contract_address",
    "is_valid_karma_project_url",
    "milestone_progress",
    "parse_milestone_type",
    "validate_payload",
]

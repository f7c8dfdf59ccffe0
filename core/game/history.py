"""Round history and decision accuracy for a training session."""

from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any


@dataclass
class DecisionRecord:
    """A single scored player decision."""

    action: str
    recommended: str
    reason: str
    is_correct: bool
    player_total: int
    is_soft: bool
    is_pair: bool
    dealer_upcard: str
    timestamp: str = ""

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    @property
    def situation(self) -> str:
        """Chart cell the decision was made in, e.g. 'soft 18 vs 9'."""
        if self.is_pair:
            kind = "pair"
        elif self.is_soft:
            kind = "soft"
        else:
            kind = "hard"
        return f"{kind} {self.player_total} vs {self.dealer_upcard}"


@dataclass
class HandResult:
    """Settled result of one player hand."""

    cards: list[str]
    wager: int
    outcome: str
    delta: int
    text: str


@dataclass
class RoundRecord:
    """Complete record of a settled round."""

    id: str = ""
    timestamp: str = ""

    dealer_cards: list[str] = field(default_factory=list)
    hands: list[HandResult] = field(default_factory=list)
    decisions: list[DecisionRecord] = field(default_factory=list)

    total_wager: int = 0
    total_return: int = 0
    net: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            self.id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            dealer_cards=list(data["dealer_cards"]),
            hands=[HandResult(**h) for h in data["hands"]],
            decisions=[DecisionRecord(**d) for d in data["decisions"]],
            total_wager=data["total_wager"],
            total_return=data["total_return"],
            net=data["net"],
        )


@dataclass
class MistakeStats:
    """How often a specific chart cell was misplayed."""

    situation: str
    correct_action: str
    count: int = 0


class TrainingHistory:
    """Settled rounds (newest first) and decisions of the round in progress."""

    def __init__(self) -> None:
        self._rounds: list[RoundRecord] = []
        self._pending: list[DecisionRecord] = []

    def record_decision(self, decision: DecisionRecord) -> None:
        """Attach a decision to the round in progress."""
        self._pending.append(decision)

    def record_round(self, record: RoundRecord) -> RoundRecord:
        """Close the round in progress, moving its decisions into ``record``."""
        record.decisions.extend(self._pending)
        self._pending = []
        self._rounds.insert(0, record)
        return record

    @property
    def rounds(self) -> list[RoundRecord]:
        return list(self._rounds)

    @property
    def decisions(self) -> list[DecisionRecord]:
        """Every scored decision, oldest first, including the open round."""
        settled = [d for r in reversed(self._rounds) for d in r.decisions]
        return settled + self._pending

    @property
    def total_decisions(self) -> int:
        return len(self.decisions)

    @property
    def correct_decisions(self) -> int:
        return sum(1 for d in self.decisions if d.is_correct)

    @property
    def accuracy(self) -> float:
        """Share of decisions matching basic strategy (0.0 with none made)."""
        total = self.total_decisions
        return self.correct_decisions / total if total else 0.0

    @property
    def net_result(self) -> int:
        return sum(r.net for r in self._rounds)

    def mistake_breakdown(self) -> list[MistakeStats]:
        """Misplayed situations, most frequent first."""
        counts: Counter[tuple[str, str]] = Counter(
            (d.situation, d.recommended) for d in self.decisions if not d.is_correct
        )
        return [
            MistakeStats(situation=situation, correct_action=action, count=count)
            for (situation, action), count in counts.most_common()
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rounds": [r.to_dict() for r in self._rounds],
            "pending": [asdict(d) for d in self._pending],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrainingHistory":
        history = cls()
        history._rounds = [RoundRecord.from_dict(r) for r in data.get("rounds", [])]
        history._pending = [DecisionRecord(**d) for d in data.get("pending", [])]
        return history

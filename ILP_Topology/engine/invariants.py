"""Named graph invariants with edge-triggered violation tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List

from invariants import checks

from ..graph.model import utc_now
from .state import GraphState

logger = logging.getLogger(__name__)

Predicate = Callable[[GraphState], bool]


@dataclass
class Invariant:
    """A boolean predicate over the whole graph.

    ``violated`` persists between evaluations so a violation is reported once
    on the transition and not again while the condition holds.
    """

    id: str
    name: str
    description: str
    check: Predicate = field(repr=False)
    violated: bool = False
    last_checked: str = field(default_factory=utc_now)
    error: str | None = None


def default_invariants(visible_risk_trust: float = 0.8) -> List[Invariant]:
    """Return the four standard connector-map invariants."""

    return [
        Invariant(
            id="inv-no-custody",
            name="No Hidden Custody",
            description="All custodial relationships must be explicitly flagged",
            check=lambda s: checks.no_hidden_custody(s.connectors.values()),
        ),
        Invariant(
            id="inv-no-fake-bridges",
            name="No Fake Bridges",
            description="Bridge connectors must have verified claims or observations",
            check=lambda s: checks.no_fake_bridges(s.connectors.values()),
        ),
        Invariant(
            id="inv-falsifiable",
            name="Corridors Must Be Falsifiable",
            description="Every active corridor must have observable criteria for failure",
            check=lambda s: checks.corridors_falsifiable(s.corridors.values()),
        ),
        Invariant(
            id="inv-visible-risk",
            name="Risk Must Be Visible",
            description="All connectors with non-trivial risk must have risk_flags",
            check=lambda s: checks.risk_visible(
                s.connectors.values(), visible_risk_trust
            ),
        ),
    ]


class InvariantEngine:
    """Evaluate invariants against a :class:`GraphState`."""

    def __init__(
        self, state: GraphState, invariants: Iterable[Invariant] | None = None
    ) -> None:
        self.state = state
        self.invariants: List[Invariant] = (
            list(invariants) if invariants is not None else default_invariants()
        )

    def evaluate(self) -> List[Invariant]:
        """Check every invariant and return those that just became violated.

        A predicate that raises counts as violated for this evaluation; the
        remaining invariants are still checked.
        """

        newly: List[Invariant] = []
        for inv in self.invariants:
            was_violated = inv.violated
            try:
                ok = bool(inv.check(self.state))
                inv.error = None
            except Exception as exc:
                logger.exception("Invariant %s raised during evaluation", inv.id)
                ok = False
                inv.error = repr(exc)
            inv.violated = not ok
            inv.last_checked = utc_now()
            if inv.violated and not was_violated:
                logger.warning("Invariant violated: %s", inv.name)
                newly.append(inv)
        return newly

    def get(self, invariant_id: str) -> Invariant | None:
        for inv in self.invariants:
            if inv.id == invariant_id:
                return inv
        return None

    @property
    def violated(self) -> List[Invariant]:
        return [inv for inv in self.invariants if inv.violated]

    def results(self) -> Dict[str, bool]:
        """Map invariant id to ``True`` when it currently holds."""

        return {inv.id: not inv.violated for inv in self.invariants}

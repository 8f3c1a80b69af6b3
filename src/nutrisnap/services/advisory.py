"""Advice and food swap suggestions derived from a meal's impact."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from nutrisnap.domain.glycemic import (
    Advice,
    ImpactDetail,
    SwapOption,
    SwapSuggestion,
)
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.lookup import NameLookup


@dataclass
class AdvisoryGenerator:
    """Generates tips and lower-impact swaps for a meal."""

    parameters: ModelParameters
    swap_lookup: NameLookup[SwapOption] = field(init=False)

    def __post_init__(self) -> None:
        self.swap_lookup = NameLookup(self.parameters.swap_table)

    def advice(self, total_impact: float) -> list[Advice]:
        """Return the general tip plus every tier the impact exceeds."""
        tips = [self.parameters.general_advice]
        for tier in sorted(self.parameters.advice_tiers, key=lambda t: t.min_impact):
            if total_impact > tier.min_impact:
                tips.extend(tier.advice)
        return tips

    def swap_suggestions(self, details: Sequence[ImpactDetail]) -> list[SwapSuggestion]:
        """Suggest swaps for the highest-impact foods that have an alternative."""
        high_impact = sorted(
            (
                detail
                for detail in details
                if detail.impact > self.parameters.swap_min_impact
            ),
            key=lambda detail: detail.impact,
            reverse=True,
        )
        suggestions = []
        for detail in high_impact[: self.parameters.swap_limit]:
            option = self.swap_lookup.find(detail.name)
            if option is None:
                continue
            suggestions.append(SwapSuggestion(original_food=detail.name, option=option))
        return suggestions

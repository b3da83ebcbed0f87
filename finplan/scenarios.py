"""Named loan scenarios compared against a base scenario.

A comparison keeps up to ``MAX_SCENARIOS`` scenarios in insertion order. The
first scenario added becomes the base; removing the base promotes the oldest
remaining scenario. Nothing is persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from . import config as cfg
from .data_models import LoanResult, ScenarioMetrics
from .engine import compute_schedule
from .schedule import LoanConfig
from .utils import round_currency

logger = logging.getLogger(__name__)


@dataclass
class LoanScenario:
    name: str
    config: LoanConfig
    result: LoanResult
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=datetime.now)


class ScenarioComparison:
    """Loan scenarios and their metrics relative to the base scenario."""

    def __init__(self, max_scenarios: int = cfg.MAX_SCENARIOS) -> None:
        self.scenarios: List[LoanScenario] = []
        self.base_id: Optional[str] = None
        self.max_scenarios = max_scenarios

    def add_scenario(self, name: str, config: LoanConfig) -> LoanScenario:
        """Simulate ``config`` and keep it under ``name``.

        Raises :class:`~finplan.errors.ConfigurationError` for an invalid
        configuration; nothing is added in that case.
        """
        scenario = LoanScenario(name=name, config=config, result=compute_schedule(config))
        self.scenarios.append(scenario)
        if self.base_id is None:
            self.base_id = scenario.id
        while self.max_scenarios and len(self.scenarios) > self.max_scenarios:
            dropped = self.scenarios[0]
            logger.debug("Dropping scenario %s to stay within %d", dropped.name, self.max_scenarios)
            self.remove_scenario(dropped.id)
        return scenario

    def remove_scenario(self, scenario_id: str) -> None:
        self.scenarios = [s for s in self.scenarios if s.id != scenario_id]
        if self.base_id == scenario_id:
            self.base_id = self.scenarios[0].id if self.scenarios else None

    def clear(self) -> None:
        self.scenarios = []
        self.base_id = None

    def get(self, scenario_id: str) -> Optional[LoanScenario]:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None

    def set_base(self, scenario_id: str) -> None:
        if self.get(scenario_id) is None:
            raise ValueError(f"Scenario '{scenario_id}' not found")
        self.base_id = scenario_id

    def metrics(self) -> List[ScenarioMetrics]:
        base = self.get(self.base_id) if self.base_id else None
        if base is None:
            return []
        rows = []
        for scenario in self.scenarios:
            result = scenario.result
            rows.append(
                ScenarioMetrics(
                    id=scenario.id,
                    name=scenario.name,
                    total_interest=result.total_interest,
                    total_payment=result.total_payment,
                    periods=result.periods,
                    interest_saved_vs_base=round_currency(base.result.total_interest - result.total_interest),
                    tenure_reduced_vs_base=base.result.periods - result.periods,
                    is_base=scenario.id == self.base_id,
                )
            )
        return rows


def compare_scenarios(configs: Dict[str, LoanConfig], base: Optional[str] = None) -> List[ScenarioMetrics]:
    """Compare named configurations; the base is ``base`` or the first name."""
    if base is not None and base not in configs:
        raise ValueError(f"Base scenario '{base}' not found")
    comparison = ScenarioComparison(max_scenarios=0)
    for name, config in configs.items():
        scenario = comparison.add_scenario(name, config)
        if name == base:
            comparison.set_base(scenario.id)
    return comparison.metrics()

"""Pension computation block.

Evaluates, for every adult of the household, the general-regime and the
complementary pension of one year.

Output DataFrames:
- pensions_by_person: One row per adult and regime with diagnostics
- pensions_summary: Household totals
"""

import logging
from typing import List, Optional
import pandas as pd

from .base import Block, BlockContext
from ..schemas import Adult, Household, ModelCFG

logger = logging.getLogger(__name__)

PENSION_COLUMNS = [
    "name",
    "regime",
    "payable",
    "rate_or_coefficient",
    "reference_duration",
    "insured_duration",
    "points",
    "gross",
    "net",
]


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


class PensionBlock(Block):
    """Yearly pensions of the household adults.

    Inputs (from context):
        - household: Household
        - model_cfg: ModelCFG
        - evaluation_year: int

    Outputs (to context):
        - pensions_by_person: DataFrame with columns:
            * name: Adult name
            * regime: "general" or "points"
            * payable: True if the pension is paid this year (claimed and alive)
            * rate_or_coefficient: Pension rate in percent (general) or
              minoration / majoration coefficient (points)
            * reference_duration: Quarters required for the full rate (general)
            * insured_duration: Uncapped insured quarters (general)
            * points: Projected points (points)
            * gross: Yearly gross pension (0 when not payable)
            * net: Yearly net pension (0 when not payable)

        - pensions_summary: DataFrame with single row:
            * evaluation_year, gross_total, net_total, payable_count

    Example:
        context = BlockContext()
        context.set("household", household)
        context.set("model_cfg", ModelCFG())
        context.set("evaluation_year", 2030)

        PensionBlock().execute(context)
        context.get("pensions_by_person")
    """

    def __init__(
        self,
        household_key: str = "household",
        model_cfg_key: str = "model_cfg",
        evaluation_year_key: str = "evaluation_year",
    ):
        self.household_key = household_key
        self.model_cfg_key = model_cfg_key
        self.evaluation_year_key = evaluation_year_key

    def inputs(self) -> List[str]:
        return [self.household_key, self.model_cfg_key, self.evaluation_year_key]

    def outputs(self) -> List[str]:
        return ["pensions_by_person", "pensions_summary"]

    def execute(self, context: BlockContext) -> None:
        household: Household = context.get(self.household_key)
        cfg: ModelCFG = context.get(self.model_cfg_key)
        year: int = context.get(self.evaluation_year_key)

        rows = []
        for adult in household.adults:
            rows.append(self._general_row(adult, cfg, year))
            rows.append(self._points_row(adult, household, cfg, year))

        by_person = pd.DataFrame(rows, columns=PENSION_COLUMNS)
        logger.debug("%d pension rows computed for %s", len(by_person), year)
        context.set("pensions_by_person", by_person)
        context.set("pensions_summary", self._compute_summary(by_person, year))

    def _general_row(self, adult: Adult, cfg: ModelCFG, year: int) -> dict:
        pension = cfg.retirement.general_regime_pension(adult, cfg.fiscal, year)
        payable = pension is not None and adult.is_alive(year)
        return {
            "name": adult.name,
            "regime": "general",
            "payable": payable,
            "rate_or_coefficient": _optional_float(pension.rate if pension else None),
            "reference_duration": pension.reference_duration if pension else None,
            "insured_duration": pension.uncapped_duration if pension else None,
            "points": None,
            "gross": float(pension.gross) if payable else 0.0,
            "net": float(pension.net) if payable else 0.0,
        }

    def _points_row(self, adult: Adult, household: Household, cfg: ModelCFG, year: int) -> dict:
        pension = cfg.retirement.points_regime_pension(adult, household, cfg.fiscal, year)
        payable = pension is not None and adult.is_alive(year)
        return {
            "name": adult.name,
            "regime": "points",
            "payable": payable,
            "rate_or_coefficient": _optional_float(pension.coefficient if pension else None),
            "reference_duration": None,
            "insured_duration": None,
            "points": pension.points if pension else None,
            "gross": float(pension.gross) if payable else 0.0,
            "net": float(pension.net) if payable else 0.0,
        }

    def _compute_summary(self, by_person: pd.DataFrame, year: int) -> pd.DataFrame:
        return pd.DataFrame([{
            "evaluation_year": year,
            "gross_total": float(by_person["gross"].sum()) if not by_person.empty else 0.0,
            "net_total": float(by_person["net"].sum()) if not by_person.empty else 0.0,
            "payable_count": int(by_person["payable"].sum()) if not by_person.empty else 0,
        }])

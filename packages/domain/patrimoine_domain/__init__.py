"""Patrimoine Domain Engine - Household pensions and succession rules.

This package provides the domain layer of a household wealth simulator:
- Retirement pensions of the general (quarters) and complementary (points) regimes
- Ownership of assets, with usufruct / bare ownership dismemberment
- Redistribution of ownership on death according to the spouse's fiscal option
- Inheritance, life-insurance and pension levies

The domain layer is designed to be:
- Framework-agnostic (no UI, no persistence)
- Testable (pure Python with Pydantic validation)
- Parameterised (every regulatory grid is injected through ModelCFG)
"""

from .schemas import *  # noqa: F403, F401

__version__ = "0.1.0"

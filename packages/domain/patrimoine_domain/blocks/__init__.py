"""Computation blocks for household simulations.

This package contains the computation layer that turns domain schemas into
pandas DataFrames for reporting or further analysis.

Architecture:
    Schemas (data models + rules) → Blocks (computation) → DataFrames (output)

Available blocks:
- PensionBlock: Yearly general-regime and complementary pensions per adult
- SuccessionBlock: Ownership transfers and inheritance duties on a death

Usage:
    from patrimoine_domain.blocks import BlockContext, BlockExecutor, PensionBlock

    context = BlockContext()
    context.set("household", household)
    context.set("model_cfg", ModelCFG())
    context.set("evaluation_year", 2030)

    BlockExecutor([PensionBlock()]).execute(context)
    pensions_df = context.get("pensions_by_person")
"""

from .base import Block, BlockContext, BlockExecutor, CircularDependencyError, topological_sort
from .pension import PensionBlock
from .succession import SuccessionBlock

__all__ = [
    "Block",
    "BlockContext",
    "BlockExecutor",
    "CircularDependencyError",
    "topological_sort",
    "PensionBlock",
    "SuccessionBlock",
]

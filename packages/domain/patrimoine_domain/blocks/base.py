"""Block infrastructure for yearly household computations.

A simulation year is evaluated by a set of blocks sharing a BlockContext:
- Block: declares the context keys it reads and writes
- BlockContext: key/value store holding schemas, configuration and DataFrames
- topological_sort: orders blocks so that producers run before consumers
- BlockExecutor: runs the ordered blocks and checks their declared keys
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

from ..schemas.errors import PatrimoineError

logger = logging.getLogger(__name__)


# =============================================================================
# Block Context
# =============================================================================

@dataclass
class BlockContext:
    """Shared inputs and outputs of the blocks of one evaluation.

    Example:
        context = BlockContext()
        context.set("household", household)
        context.set("model_cfg", ModelCFG())
        context.set("evaluation_year", 2030)

        PensionBlock().execute(context)
        pensions_df = context.get("pensions_by_person")
    """

    _data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Value stored under key.

        Raises:
            KeyError: If nothing is stored under key
        """
        try:
            return self._data[key]
        except KeyError:
            raise KeyError(f"'{key}' is not in context (keys: {sorted(self._data)})") from None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data)


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """A computation step over the context.

    Subclasses name the keys they read (inputs) and the keys they write
    (outputs). Context keys may be renamed through constructor arguments so that
    a same block can run twice on different inputs.

    Subclass example:
        class NetWorthBlock(Block):
            def inputs(self) -> List[str]:
                return ["patrimoine", "evaluation_year"]

            def outputs(self) -> List[str]:
                return ["net_worth"]

            def execute(self, context: BlockContext) -> None:
                patrimoine = context.get("patrimoine")
                context.set("net_worth", pd.DataFrame([{"total": float(patrimoine.total_value)}]))
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        """Context keys read by the block."""

    @abstractmethod
    def outputs(self) -> List[str]:
        """Context keys written by the block."""

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Read inputs from context and write every declared output."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inputs={self.inputs()}, outputs={self.outputs()})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(PatrimoineError):
    """Raised when blocks depend on each other's outputs in a cycle."""
    pass


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Order blocks so that every block runs after the producers of its inputs.

    Kahn's algorithm over the graph "producer of key -> consumer of key". Inputs
    that no block produces must be supplied by the initial context. Blocks
    without mutual dependencies keep their given order.

    Raises:
        ValueError: If two blocks declare the same output
        CircularDependencyError: If the dependency graph has a cycle
    """
    producers: Dict[str, Block] = {}
    for block in blocks:
        for key in block.outputs():
            if key in producers:
                raise ValueError(f"'{key}' is produced by both {producers[key]} and {block}")
            producers[key] = block

    pending: Dict[Block, int] = {block: 0 for block in blocks}
    consumers: Dict[Block, List[Block]] = {block: [] for block in blocks}
    for block in blocks:
        for key in block.inputs():
            producer = producers.get(key)
            if producer is not None:
                consumers[producer].append(block)
                pending[block] += 1

    ready: Deque[Block] = deque(block for block in blocks if pending[block] == 0)
    ordered: List[Block] = []
    while ready:
        block = ready.popleft()
        ordered.append(block)
        for consumer in consumers[block]:
            pending[consumer] -= 1
            if pending[consumer] == 0:
                ready.append(consumer)

    if len(ordered) != len(blocks):
        cycle = [block for block in blocks if pending[block] > 0]
        raise CircularDependencyError(f"blocks depend on each other in a cycle: {cycle}")
    return ordered


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Runs blocks in dependency order.

    Example:
        executor = BlockExecutor([SuccessionBlock(), PensionBlock()])
        context = executor.execute(context)
        context.get("succession_by_heir")
    """

    def __init__(self, blocks: List[Block]):
        self.blocks = blocks
        self._order: Optional[List[Block]] = None

    @property
    def order(self) -> List[Block]:
        """Execution order, computed once."""
        if self._order is None:
            self._order = topological_sort(self.blocks)
        return self._order

    def execute(self, context: BlockContext) -> BlockContext:
        """Run every block on context.

        Raises:
            CircularDependencyError: If blocks depend on each other in a cycle
            KeyError: If an input is neither in context nor produced by a block
            ValueError: If a block does not write one of its declared outputs
        """
        for block in self.order:
            missing = [key for key in block.inputs() if not context.has(key)]
            if missing:
                raise KeyError(f"{block} is missing inputs {missing} (context keys: {context.keys()})")

            logger.debug("executing %r", block)
            block.execute(context)

            unwritten = [key for key in block.outputs() if not context.has(key)]
            if unwritten:
                raise ValueError(f"{block} did not write its outputs {unwritten}")
        return context

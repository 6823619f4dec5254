"""Per-run configuration of the struct generator."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from jsontostruct.fieldstats import DEFAULT_PROBE_LIMIT
from jsontostruct.resolvedtype import FieldOrder


class MergeStrategy(Enum):
    """How samples are combined into one type."""
    # accumulate field statistics, then resolve once
    STATISTICS = 'statistics'
    # build a type per sample and merge pairwise
    PAIRWISE = 'pairwise'


@dataclass
class GeneratorConfig:
    """
    Options for one generator run.

    A config is built by the caller and handed to the generator; nothing in
    the package keeps module-level defaults that a run could mutate.
    """
    type_name: str = 'Document'
    package_name: str = 'main'
    omit_empty: bool = True
    field_order: FieldOrder = FieldOrder.ALPHABETICAL
    extract_structs: bool = False
    stat_comments: bool = False
    merge_strategy: MergeStrategy = MergeStrategy.STATISTICS
    # maximum number of samples to read, 0 reads everything
    sample_size: int = 0
    probe_limit: int = DEFAULT_PROBE_LIMIT
    template_dir: Optional[str] = None
    gofmt: bool = True
    update_interval_ms: int = 500

    def __post_init__(self):
        if isinstance(self.field_order, str):
            self.field_order = FieldOrder(self.field_order)
        if isinstance(self.merge_strategy, str):
            self.merge_strategy = MergeStrategy(self.merge_strategy)
        if self.sample_size < 0:
            raise ValueError("sample_size must not be negative")
        if self.probe_limit < 1:
            raise ValueError("probe_limit must be positive")

"""Infers Go struct definitions from JSON documents.

This module provides:
- SampleReader: splits input text into object samples (single document,
  top-level array, or newline-delimited JSON)
- StructGenerator: accumulates, resolves, extracts and renders one run
- convert_json_to_go / infer_go_struct_from_json: file and value entry points
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from jsontostruct.common import type_identifier
from jsontostruct.config import GeneratorConfig, MergeStrategy
from jsontostruct.fieldstats import StructStats
from jsontostruct.progress import StreamProgress
from jsontostruct.resolvedtype import ResolvedType, TypeKind
from jsontostruct.structextract import StructDesignator
from jsontostruct.structtogo import RenderError, StructToGo
from jsontostruct.typemerge import merge_types, type_from_value
from jsontostruct.typeresolver import TypeResolver

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """
    Exception raised when the input holds no usable JSON object samples.

    Attributes:
        message: Human-readable error description
        line: 1-based line of a decode error, if known
        column: 1-based column of a decode error, if known
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        full_message = message
        if line is not None:
            full_message = f"{message} (line {line}, column {column})"
        super().__init__(full_message)


class SampleReader:
    """
    Iterates the object samples contained in a JSON text.

    * text starting with ``[`` is one array document; its object elements are
      the samples and a decode error is fatal;
    * otherwise the text is tried as a single object document;
    * failing that it is read as newline-delimited JSON, skipping lines that
      do not decode to an object.

    ``total`` is known up front for array documents only. Unless
    ``require_samples`` is off, iteration raises ``InputError`` when no sample
    at all was found.
    """

    def __init__(self, text: str, sample_size: int = 0, require_samples: bool = True):
        self.text = text.strip()
        self.sample_size = sample_size
        self.require_samples = require_samples
        self.total: Optional[int] = None
        self.count = 0
        self.skipped = 0

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        self.count = 0
        self.skipped = 0
        for sample in self._samples():
            self.count += 1
            yield sample
            if self.sample_size and self.count >= self.sample_size:
                return
        if self.count == 0 and self.require_samples:
            raise InputError("no valid JSON objects found")

    def _samples(self) -> Iterator[Dict[str, Any]]:
        if not self.text:
            return
        if self.text.startswith('['):
            yield from self._array_samples()
            return
        try:
            document = json.loads(self.text)
        except ValueError:
            # JSONDecodeError, or an integer literal beyond the conversion limit
            yield from self._line_samples()
            return
        if not isinstance(document, dict):
            raise InputError(f"unexpected type: {type(document).__name__}")
        self.total = 1
        yield document

    def _array_samples(self) -> Iterator[Dict[str, Any]]:
        try:
            items = json.loads(self.text)
        except json.JSONDecodeError as e:
            raise InputError(f"error parsing JSON array: {e.msg}", e.lineno, e.colno) from e
        except ValueError as e:
            raise InputError(f"error parsing JSON array: {e}") from e
        if not isinstance(items, list):
            raise InputError(f"unexpected type: {type(items).__name__}")
        if not items:
            raise InputError("empty array")
        self.total = len(items)
        for item in items:
            if isinstance(item, dict):
                yield item
            else:
                self.skipped += 1
                logger.debug("skipping array element of type %s", type(item).__name__)

    def _line_samples(self) -> Iterator[Dict[str, Any]]:
        for lineno, line in enumerate(self.text.splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except ValueError as e:
                self.skipped += 1
                logger.debug("skipping line %d: %s", lineno, getattr(e, "msg", e))
                continue
            if not isinstance(obj, dict):
                self.skipped += 1
                logger.debug("skipping line %d: not a JSON object", lineno)
                continue
            yield obj


@dataclass
class GenerationResult:
    """Outcome of one run."""
    root: ResolvedType
    definitions: List[ResolvedType] = field(default_factory=list)
    source: str = ''
    sample_count: int = 0
    stats: Optional[StructStats] = None


class StructGenerator:
    """Runs the inference pipeline for one configuration."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config if config is not None else GeneratorConfig()
        self.resolver = TypeResolver(self.config.field_order)
        self.renderer = StructToGo(self.config)

    @property
    def type_name(self) -> str:
        return type_identifier(self.config.type_name)

    def accumulate(self, samples: Iterable[Dict[str, Any]],
                   on_sample: Optional[Callable[[StructStats, int], None]] = None) -> StructStats:
        """
        Accumulate samples into fresh statistics.

        A sample that is not JSON is skipped. ``KeyboardInterrupt`` stops
        reading at the current sample boundary and keeps what was gathered.
        """
        stats = StructStats(self.config.probe_limit)
        try:
            for sample in samples:
                try:
                    stats.add_sample(sample)
                except TypeError as e:
                    logger.warning("skipping sample %d: %s", stats.total_samples + 1, e)
                    continue
                if on_sample is not None:
                    on_sample(stats, stats.total_samples)
        except KeyboardInterrupt:
            logger.warning("interrupted after %d samples", stats.total_samples)
        return stats

    def resolve(self, stats: StructStats) -> ResolvedType:
        """Resolve statistics into the root record."""
        return self.resolver.resolve(stats, self.type_name)

    def merge_samples(self, samples: Iterable[Dict[str, Any]],
                      on_sample: Optional[Callable[[ResolvedType, int], None]] = None) -> tuple:
        """
        Fold per-sample types with the pairwise merge.

        Returns:
            ``(root, sample_count)``; ``root`` is ``None`` for no samples.
        """
        root: Optional[ResolvedType] = None
        count = 0
        try:
            for sample in samples:
                typ = type_from_value(self.type_name, sample, self.config.field_order)
                root = typ if root is None else merge_types(root, typ)
                count += 1
                if on_sample is not None:
                    on_sample(root, count)
        except KeyboardInterrupt:
            logger.warning("interrupted after %d samples", count)
        return root, count

    def extract(self, root: ResolvedType) -> List[ResolvedType]:
        """Run the struct designator when extraction is enabled."""
        if not self.config.extract_structs:
            return []
        return StructDesignator(self.type_name).extract(root)

    def build(self, samples: Iterable[Dict[str, Any]],
              on_update: Optional[Callable[[Callable[[], ResolvedType], int], None]] = None) -> GenerationResult:
        """
        Infer the schema of ``samples`` without rendering it.

        ``on_update`` receives a zero-argument callable producing the type
        resolved so far plus the sample count, after every sample.

        Raises:
            InputError: if no sample was accumulated.
        """
        if self.config.merge_strategy is MergeStrategy.PAIRWISE:
            hook = None
            if on_update is not None:
                hook = lambda root, n: on_update(root.copy, n)
            root, count = self.merge_samples(samples, hook)
            stats = None
        else:
            hook = None
            if on_update is not None:
                hook = lambda s, n: on_update(lambda: self.resolve(s), n)
            stats = self.accumulate(samples, hook)
            count = stats.total_samples
            root = self.resolve(stats) if count else None
        if root is None or count == 0:
            raise InputError("no valid JSON objects found")
        if root.kind is not TypeKind.RECORD:
            raise InputError(f"unexpected top-level kind: {root.kind.value}")
        definitions = self.extract(root)
        logger.info("resolved %d fields from %d samples, %d shared definitions",
                    len(root.children), count, len(definitions))
        return GenerationResult(root, definitions, '', count, stats)

    def render(self, result: GenerationResult) -> str:
        result.source = self.renderer.render(result.root, result.definitions)
        return result.source

    def generate(self, text: str) -> GenerationResult:
        """Infer and render the struct for a JSON text."""
        result = self.build(SampleReader(text, self.config.sample_size))
        self.render(result)
        return result

    def generate_stream(self, samples: Iterable[Dict[str, Any]], progress: StreamProgress) -> GenerationResult:
        """
        Like ``generate`` but repaints the source generated so far on
        ``progress`` while samples are read. Repaints never touch the
        accumulated statistics and a failed repaint is skipped.

        ``samples`` is usually a ``SampleReader``; its ``total`` is shown
        once known.
        """

        def on_update(snapshot: Callable[[], ResolvedType], count: int) -> None:
            if not progress.is_terminal or not progress.due(count):
                return
            progress.update(self.preview(snapshot()), count, getattr(samples, 'total', None))

        result = self.build(samples, on_update)
        self.render(result)
        progress.finish(result.source, result.sample_count)
        return result

    def preview(self, root: ResolvedType) -> str:
        """Best-effort rendering of an intermediate tree."""
        definitions = self.extract(root)
        try:
            return self.renderer.render(root, definitions)
        except RenderError as e:
            return e.source


def iter_file_samples(input_files: List[str], sample_size: int = 0) -> Iterator[Dict[str, Any]]:
    """
    Chain the samples of several files; each file is read in its own mode.

    A file without any object sample is logged and skipped. Stops after ``sample_size`` samples overall when that is set.
    """
    count = 0
    for file_path in input_files:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
        reader = SampleReader(text, require_samples=False)
        for sample in reader:
            yield sample
            count += 1
            if sample_size and count >= sample_size:
                return
        if reader.count == 0:
            logger.warning("no valid JSON objects in %s", file_path)


def convert_json_to_go(input_files: List[str], go_file: Optional[str], config: Optional[GeneratorConfig] = None) -> str:
    """Infers a Go struct from JSON files.

    Each file is read on its own: a single document, a top-level array of
    objects, or newline-delimited JSON. Samples of all files are analyzed
    together to produce one struct.

    Args:
        input_files: List of JSON file paths to analyze
        go_file: Output path for the Go source, or None to only return it
        config: Generator options

    Returns:
        The generated Go source.
    """
    if not input_files:
        raise ValueError("At least one input file is required")
    generator = StructGenerator(config)
    result = generator.build(iter_file_samples(input_files, generator.config.sample_size))
    source = generator.render(result)

    if go_file:
        # Ensure output directory exists
        output_dir = os.path.dirname(go_file)
        if output_dir and not os.path.exists(output_dir):
            os.makedirs(output_dir)
        with open(go_file, 'w', encoding='utf-8') as f:
            f.write(source)
    return source


def infer_go_struct_from_json(values: List[Any], type_name: str = 'Document', **options) -> str:
    """Infers Go source from already parsed JSON values.

    Top-level lists are flattened; non-object values are ignored.

    Args:
        values: Parsed JSON values
        type_name: Name of the root struct
        **options: Further ``GeneratorConfig`` fields

    Returns:
        The generated Go source.
    """
    samples: List[Dict[str, Any]] = []
    for value in values:
        items = value if isinstance(value, list) else [value]
        samples.extend(item for item in items if isinstance(item, dict))
    generator = StructGenerator(GeneratorConfig(type_name=type_name, **options))
    result = generator.build(samples)
    return generator.render(result)

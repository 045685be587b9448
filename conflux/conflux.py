"""
Configuration instance.

``Conflux`` owns the committed aggregate and runs the load pipeline:

    sources -> merge -> schema/custom validation -> binding -> commit

A load builds a new aggregate and swaps it in only once every step
succeeded. Readers always see either the previous aggregate or the new one,
never a partial result, and a failed load leaves the previous aggregate (or
the empty state) in place.
"""

import copy
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from conflux.accessor import AccessorMixin
from conflux.binder import Binder
from conflux.codec.base import Decoder
from conflux.codec.registry import CodecKey, CodecRegistry, get_codec_registry
from conflux.context import Context
from conflux.core.enums import LoadState
from conflux.core.exceptions import ConfigError, DumpError, SourceError
from conflux.dumper import Dumper, FileDumper
from conflux.logger import get_conflux_logger
from conflux.merge import merge_fragments
from conflux.source import ConsulSource, ContentSource, FileSource, OSEnvVarSource, Source
from conflux.validator import CustomValidator, JSONSchemaValidator, SchemaValidator, ValidationPipeline


class Conflux(AccessorMixin):
    """
    Aggregates configuration from ordered sources and serves it to readers.

    Sources are merged in registration order, later sources overriding
    earlier ones leaf by leaf. Keys are case-insensitive.

    Args:
        sources: Sources, lowest precedence first
        dumpers: Sinks used by :meth:`dump`
        binding: Dataclass instance populated on every successful load
        json_schema: JSON Schema the merged aggregate must satisfy
        validators: Functions run against the merged aggregate
        parallel_sources: Load sources concurrently; results are still
            merged in registration order
        codec_registry: Registry used by the ``add_*`` helpers taking a
            format identifier; defaults to the process-wide one
    """

    def __init__(self, sources: Optional[Iterable[Source]] = None,
                 dumpers: Optional[Iterable[Dumper]] = None,
                 binding: Any = None,
                 json_schema: Union[Mapping[str, Any], str, bytes, None] = None,
                 validators: Optional[Iterable[CustomValidator]] = None,
                 parallel_sources: bool = False,
                 codec_registry: Optional[CodecRegistry] = None):
        self.logger = get_conflux_logger(component="Conflux")
        self._lock = threading.RLock()
        self._load_lock = threading.Lock()

        self._values: Optional[Dict[str, Any]] = None
        self._loading = 0

        self._sources: List[Source] = []
        self._dumpers: List[Dumper] = []
        self._binding: Any = None
        self._binder = Binder()
        self._pipeline = ValidationPipeline()
        self.parallel_sources = parallel_sources
        self.codec_registry = codec_registry or get_codec_registry()

        for source in sources or []:
            self.add_source(source)
        for dumper in dumpers or []:
            self.add_dumper(dumper)
        for validator in validators or []:
            self.add_validator(validator)
        if binding is not None:
            self.set_binding(binding)
        if json_schema is not None:
            self.set_json_schema(json_schema)

    # Registration

    def add_source(self, source: Optional[Source]) -> 'Conflux':
        """Register a source; ``None`` is ignored."""
        if source is None:
            return self
        with self._lock:
            self._sources.append(source)
        self.logger.debug("Source registered", source=repr(source), position=len(self._sources) - 1)
        return self

    def add_file_source(self, path: Union[str, Path], codec_type: CodecKey) -> 'Conflux':
        """
        Register a file decoded with the codec registered for ``codec_type``.

        Raises:
            UnregisteredCodecError: If no decoder is registered for the format
        """
        return self.add_source(FileSource(path, self.codec_registry.get_decoder(codec_type)))

    def add_content_source(self, data: Union[bytes, str], codec_type: CodecKey) -> 'Conflux':
        """Register an in-memory document decoded with the codec for ``codec_type``."""
        return self.add_source(ContentSource(data, self.codec_registry.get_decoder(codec_type)))

    def add_env_source(self, prefix: str) -> 'Conflux':
        """Register the environment variables starting with ``prefix``."""
        return self.add_source(OSEnvVarSource(prefix))

    def add_consul_source(self, path: str, codec_type: CodecKey, **kwargs) -> 'Conflux':
        """
        Register a Consul key decoded with the codec for ``codec_type``.

        Extra keyword arguments are passed to :class:`ConsulSource`.
        """
        decoder: Decoder = self.codec_registry.get_decoder(codec_type)
        return self.add_source(ConsulSource(path, decoder, **kwargs))

    def add_dumper(self, dumper: Optional[Dumper]) -> 'Conflux':
        """Register a dumper; ``None`` is ignored."""
        if dumper is None:
            return self
        with self._lock:
            self._dumpers.append(dumper)
        self.logger.debug("Dumper registered", dumper=type(dumper).__name__)
        return self

    def add_file_dumper(self, path: Union[str, Path], codec_type: CodecKey) -> 'Conflux':
        """Register a file dumper encoding with the codec for ``codec_type``."""
        return self.add_dumper(FileDumper(path, self.codec_registry.get_encoder(codec_type)))

    def set_binding(self, target: Any) -> 'Conflux':
        """
        Set the dataclass instance populated on every load.

        The target is checked when loading, not here; ``None`` is ignored.
        """
        if target is None:
            return self
        with self._lock:
            self._binding = target
        return self

    def set_json_schema(self, schema: Union[Mapping[str, Any], str, bytes]) -> 'Conflux':
        """Validate every merged aggregate against a JSON Schema."""
        return self.set_schema_validator(JSONSchemaValidator(schema))

    def set_schema_validator(self, validator: Optional[SchemaValidator]) -> 'Conflux':
        with self._lock:
            self._pipeline.schema_validator = validator
        return self

    def add_validator(self, validator: CustomValidator) -> 'Conflux':
        """Run ``validator`` against every merged aggregate, in registration order."""
        with self._lock:
            self._pipeline.add_validator(validator)
        return self

    @property
    def sources(self) -> List[Source]:
        with self._lock:
            return list(self._sources)

    @property
    def dumpers(self) -> List[Dumper]:
        with self._lock:
            return list(self._dumpers)

    # Lifecycle

    @property
    def state(self) -> LoadState:
        with self._lock:
            if self._loading:
                return LoadState.LOADING
            return LoadState.EMPTY if self._values is None else LoadState.COMMITTED

    def load(self, ctx: Optional[Context] = None) -> None:
        """
        Load, merge, validate and bind, then commit the new aggregate.

        Loads are serialized with each other but never block readers, who
        keep seeing the previous aggregate until the commit.

        Raises:
            ConfigError: Any failure; the previously committed aggregate is
                kept and the binding target is left untouched
        """
        ctx = ctx or Context()
        with self._load_lock:
            with self._lock:
                self._loading += 1
                sources = list(self._sources)
                binding = self._binding
                pipeline = ValidationPipeline(self._pipeline.schema_validator, self._pipeline.validators)
            try:
                fragments = self._load_sources(sources, ctx)
                values = merge_fragments(fragments, [f"source[{i}]" for i in range(len(sources))])
                pipeline.validate(copy.deepcopy(values))
                if binding is not None:
                    self._binder.bind(values, binding)
                with self._lock:
                    self._values = values
            except ConfigError as e:
                self.logger.warning("Configuration load failed", error=str(e))
                raise
            finally:
                with self._lock:
                    self._loading -= 1

        self.logger.info("Configuration loaded", sources=len(sources), keys=len(values))

    def _load_sources(self, sources: List[Source], ctx: Context) -> List[Any]:
        if self.parallel_sources and len(sources) > 1:
            return self._load_sources_parallel(sources, ctx)

        fragments = []
        for index, source in enumerate(sources):
            fragments.append(self._load_source(index, source, ctx))
        return fragments

    def _load_sources_parallel(self, sources: List[Source], ctx: Context) -> List[Any]:
        ctx.raise_if_cancelled("conflux", "load")
        with ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="conflux-source") as pool:
            futures = [pool.submit(self._load_source, index, source, ctx)
                       for index, source in enumerate(sources)]
            # Raise the first failure in registration order
            return [future.result() for future in futures]

    def _load_source(self, index: int, source: Source, ctx: Context) -> Any:
        label = f"source[{index}]"
        ctx.raise_if_cancelled(label, "load")
        try:
            return source.load(ctx)
        except Exception as e:
            raise SourceError(label, "load", e)

    def dump(self, ctx: Optional[Context] = None) -> None:
        """
        Write the committed aggregate to every dumper, in registration order.

        Stops at the first failing dumper; earlier writes are not undone.

        Raises:
            DumpError: If a dumper fails
        """
        ctx = ctx or Context()
        values = self.values()
        for index, dumper in enumerate(self.dumpers):
            label = f"dumper[{index}]"
            ctx.raise_if_cancelled(label, "dump")
            try:
                dumper.dump(ctx, copy.deepcopy(values))
            except Exception as e:
                self.logger.error("Configuration dump failed", dumper=label, error=str(e))
                raise DumpError(label, "dump", e)
        self.logger.debug("Configuration dumped", dumpers=len(self.dumpers))

    # Reading

    def _snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._values if self._values is not None else {}

    def values(self) -> Dict[str, Any]:
        """Return a deep copy of the committed aggregate."""
        return copy.deepcopy(self._snapshot())

    def __repr__(self) -> str:
        return f"Conflux(state={self.state.value}, sources={len(self.sources)}, dumpers={len(self.dumpers)})"

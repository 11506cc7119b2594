"""
lazyprops: build-time generation of lazily computed, cached properties.

## Core Design Principle: Explicit Decorator Marking

Only methods explicitly marked with ``@lazy_prop`` inside classes explicitly
marked with ``@extensible`` are considered. A marked method must take no
arguments besides ``self`` and must not be annotated to return ``None``.
Anything else is silently ignored.

## Example

```python
from lazyprops import extensible, lazy_prop

@extensible
class Person:
    def __init__(self, first_name: str, last_name: str) -> None:
        self.first_name = first_name
        self.last_name = last_name

    @lazy_prop("FullName")
    def get_full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
```

Running the generator over the module above emits::

    _fullNameStorage = None
    _fullNameWritten = False

    @property
    def FullName(self) -> str:
        if not self._fullNameWritten:
            self._fullNameStorage = self.get_full_name()
            self._fullNameWritten = True
        return self._fullNameStorage

and ``lazyprops build`` merges it into ``Person``. The value is computed on
first access and frozen afterwards, even if ``first_name`` changes.

``@lazy_prop("Sum", thread_safe=True)`` guards the first computation with a
per-instance lock using double-checked locking, so concurrent readers invoke
the method exactly once. ``field_prefix="_total"`` overrides the backing field
names. The decorator may be repeated; each application yields an independent
property with its own storage.
"""

from lazyprops.compilation import Compilation, SourceFile
from lazyprops.config import GeneratorConfig, load_config
from lazyprops.errors import ConfigError, LazyPropsError
from lazyprops.generator import GenerationRequest, LazyPropGenerator, generate
from lazyprops.marker import (
    MARKER_QUALIFIED_NAMES,
    MARKER_SOURCE,
    LazyProp,
    emit_marker_definition,
    extensible,
    lazy_prop,
)
from lazyprops.merge import merge_compilation, merge_units
from lazyprops.model import CandidateMethod, GeneratedUnit, LazyPropSpec
from lazyprops.sink import DirectorySink, MemorySink, OutputSink

__all__ = [
    "CandidateMethod",
    "Compilation",
    "ConfigError",
    "DirectorySink",
    "GeneratedUnit",
    "GenerationRequest",
    "GeneratorConfig",
    "LazyProp",
    "LazyPropGenerator",
    "LazyPropSpec",
    "LazyPropsError",
    "MARKER_QUALIFIED_NAMES",
    "MARKER_SOURCE",
    "MemorySink",
    "OutputSink",
    "SourceFile",
    "emit_marker_definition",
    "extensible",
    "generate",
    "lazy_prop",
    "load_config",
    "merge_compilation",
    "merge_units",
]

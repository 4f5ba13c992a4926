"""Mode registry, numeral accumulator, cursor set and the resolver."""

from .cursors import CursorSet
from .numeral import COUNT_LIMIT, NumeralAccumulator
from .outputs import (
    ALL_CHANNELS,
    AbortedPendingCommand,
    ModeSwitch,
    Operation,
    Output,
    OutputBus,
    PrimitiveInput,
    UnboundKey,
)
from .registry import ModeRegistry
from .resolver import (
    CommandResolver,
    GlobalPolicy,
    Resolution,
    ResolverPolicy,
    ResolverSnapshot,
    ResolverState,
)

__all__ = [
    "CursorSet",
    "COUNT_LIMIT",
    "NumeralAccumulator",
    "ALL_CHANNELS",
    "AbortedPendingCommand",
    "ModeSwitch",
    "Operation",
    "Output",
    "OutputBus",
    "PrimitiveInput",
    "UnboundKey",
    "ModeRegistry",
    "CommandResolver",
    "GlobalPolicy",
    "Resolution",
    "ResolverPolicy",
    "ResolverSnapshot",
    "ResolverState",
]

"""Builds the stat dictionary for a loaded save buffer."""

from typing import Any, Dict, Iterable, Mapping, Optional, Type

from services.pm2_save_editor.errors import UnknownField
from services.pm2_save_editor.fields import (
    FieldAccessor,
    FloatField,
    IntegerField,
    StringField,
)
from services.pm2_save_editor.models import (
    FIELD_DEFINITIONS,
    FieldDefinition,
    FieldKind,
    StatId,
)
from services.pm2_save_editor.save_buffer import SaveBuffer

FieldRegistry = Dict[StatId, FieldAccessor]

# Accessor class for each kind of field
FIELD_CONSTRUCTORS: Dict[FieldKind, Type[FieldAccessor]] = {
    FieldKind.INTEGER: IntegerField,
    FieldKind.FLOAT: FloatField,
    FieldKind.STRING: StringField,
}


def build_accessor(definition: FieldDefinition, buffer: SaveBuffer) -> FieldAccessor:
    constructor = FIELD_CONSTRUCTORS.get(definition.kind)
    if constructor is None:
        raise UnknownField(
            f"No accessor for {definition.stat.value} of kind {definition.kind.value}"
        )
    return constructor(definition, buffer)


def build_registry(
    buffer: SaveBuffer,
    definitions: Optional[Mapping[StatId, FieldDefinition]] = None,
    stats: Optional[Iterable[StatId]] = None,
) -> FieldRegistry:
    """Build one accessor per stat, bound to `buffer`.

    Args:
        buffer: Save image the accessors read and write.
        definitions: Field table to use (defaults to FIELD_DEFINITIONS).
        stats: Stats to build (defaults to every StatId).

    Raises:
        UnknownField: If a stat has no definition in the table.
    """
    if definitions is None:
        definitions = FIELD_DEFINITIONS
    if stats is None:
        stats = StatId

    registry: FieldRegistry = {}
    for stat in stats:
        definition = definitions.get(stat)
        if definition is None:
            raise UnknownField(f"No field definition for {stat.value}")
        registry[stat] = build_accessor(definition, buffer)
    return registry


def snapshot(registry: Mapping[StatId, FieldAccessor]) -> Dict[StatId, Any]:
    """Decode every field in `registry`."""
    return {stat: accessor.get() for stat, accessor in registry.items()}


def find_stat(name: str) -> StatId:
    """Look up a stat by value ("fighting_rep") or display label."""
    key = name.strip().lower()
    for stat in StatId:
        if stat.value == key or FIELD_DEFINITIONS[stat].label.lower() == key:
            return stat
    raise UnknownField(f"Unknown stat: {name}")

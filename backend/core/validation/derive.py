"""Schema Derivation

Derived schemas (extend / pick / omit / partial / required / merge) are
pure transformations over an immutable SchemaShape. A shape is turned into
a concrete pydantic model only when build() is called; the source shape
and the source model are never modified.

Usage:
    user = shape_of(UserRecord)
    UserPatch = build(partial(omit(user, "id"), "name", "email"), name="UserPatch")
    UserRef = build(pick(user, "id", "name"), name="UserRef")
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field as PydanticField, create_model

from .schema import BaseSchema


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Description of one field: type with constraints, default, wire name."""
    name: str
    annotation: Any
    default: Any = ...
    alias: str | None = None
    description: str | None = None
    optional: bool = False

    @property
    def is_required(self) -> bool:
        return self.default is ... and not self.optional

    def definition(self) -> tuple[Any, Any]:
        """(annotation, FieldInfo) pair accepted by pydantic.create_model."""
        annotation = Optional[self.annotation] if self.optional else self.annotation
        default = None if self.optional and self.default is ... else self.default
        kwargs: dict[str, Any] = {}
        if self.alias:
            kwargs["alias"] = self.alias
        if self.description:
            kwargs["description"] = self.description
        return annotation, PydanticField(default, **kwargs)


@dataclass(frozen=True, slots=True)
class SchemaShape:
    """Ordered, immutable set of field descriptions."""
    name: str
    fields: tuple[FieldSpec, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.field_names

    def get(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.name} has no field '{name}'")


def shape_of(model: type[BaseModel], *, name: str | None = None) -> SchemaShape:
    """Describe an existing model's fields as a SchemaShape."""
    specs = []
    for attr, info in model.model_fields.items():
        specs.append(FieldSpec(
            name=attr,
            annotation=info.rebuild_annotation(),
            default=... if info.is_required() else info.default,
            alias=info.alias,
            description=info.description,
        ))
    return SchemaShape(name=name or model.__name__, fields=tuple(specs))


def _check_names(shape: SchemaShape, names: Iterable[str]) -> tuple[str, ...]:
    names = tuple(names)
    for n in names:
        shape.get(n)
    return names


def extend(shape: SchemaShape, *specs: FieldSpec, name: str | None = None) -> SchemaShape:
    """Add fields; a spec with an existing name replaces that field in place."""
    incoming = {s.name: s for s in specs}
    kept = tuple(incoming.pop(f.name, f) for f in shape.fields)
    return SchemaShape(name=name or shape.name, fields=kept + tuple(incoming.values()))


def merge(first: SchemaShape, second: SchemaShape, *, name: str | None = None) -> SchemaShape:
    """Fields of both shapes; second wins on name clashes."""
    return extend(first, *second.fields, name=name or f"{first.name}{second.name}")


def pick(shape: SchemaShape, *names: str, name: str | None = None) -> SchemaShape:
    wanted = set(_check_names(shape, names))
    return SchemaShape(name=name or shape.name, fields=tuple(f for f in shape.fields if f.name in wanted))


def omit(shape: SchemaShape, *names: str, name: str | None = None) -> SchemaShape:
    dropped = set(_check_names(shape, names))
    return SchemaShape(name=name or shape.name, fields=tuple(f for f in shape.fields if f.name not in dropped))


def partial(shape: SchemaShape, *names: str, name: str | None = None) -> SchemaShape:
    """Make the named fields (all when none given) optional, defaulting to None."""
    targets = set(_check_names(shape, names)) if names else set(shape.field_names)
    return SchemaShape(
        name=name or shape.name,
        fields=tuple(replace(f, optional=True) if f.name in targets else f for f in shape.fields),
    )


def required(shape: SchemaShape, *names: str, name: str | None = None) -> SchemaShape:
    """Make the named fields (all when none given) required again."""
    targets = set(_check_names(shape, names)) if names else set(shape.field_names)
    return SchemaShape(
        name=name or shape.name,
        fields=tuple(
            replace(f, optional=False, default=...) if f.name in targets else f for f in shape.fields
        ),
    )


def build(shape: SchemaShape, *, name: str | None = None, base: type[BaseModel] = BaseSchema) -> type[BaseModel]:
    """Materialize a shape as a new pydantic model class."""
    return create_model(
        name or shape.name,
        __base__=base,
        **{f.name: f.definition() for f in shape.fields},
    )

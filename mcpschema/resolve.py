"""Resolving schemas: checking them and binding their references.

A :class:`Resolved` schema has passed its well-formedness checks, and every
``$ref`` and ``$dynamicRef`` in it refers to the schema it names. Only a
resolved schema can validate instances.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote, urldefrag, urljoin, urlsplit

from mcpschema.check import DRAFT_2020_12, check, resolve_uris
from mcpschema.defaults import apply_defaults as _apply_defaults
from mcpschema.pointer import PointerError, dereference
from mcpschema.schema import ABSENT, Schema, SchemaError
from mcpschema.validate import ValidationError, Validator

Loader = Callable[[str], Schema]
"""Reads and decodes the schema at a URI."""


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


@dataclass
class ResolveOptions:
    """Options for :func:`resolve`.

    ``base_uri``, if not empty, must be absolute; the root's $id is resolved
    against it. ``loader`` loads schemas named by references that are not
    within the root; without one, such references are errors.
    ``validate_defaults`` checks every "default" value against its schema.
    """

    base_uri: str = ""
    loader: Loader | None = None
    validate_defaults: bool = False


def _check_version(root: Schema, error: type[Exception]) -> None:
    if root.schema and root.schema != DRAFT_2020_12:
        raise error(f"cannot validate version {root.schema}, only {DRAFT_2020_12}")


class Resolved:
    """A schema prepared for validation, with the URIs of its schemas."""

    def __init__(self, root: Schema, resolved_uris: dict[str, Schema]) -> None:
        self._root = root
        self.resolved_uris = resolved_uris

    @property
    def schema(self) -> Schema:
        """The schema that was resolved. It must not be modified."""
        return self._root

    def validate(self, instance: Any) -> None:
        """Raise ValidationError if instance does not satisfy the schema."""
        _check_version(self._root, ValidationError)
        Validator(self._root).validate(instance, self._root, None)

    def apply_defaults(self, instance: Any) -> None:
        """Fill in the defaults of the root's optional properties, in place."""
        _apply_defaults(self._root, instance)

    def _validate_defaults(self) -> None:
        # Each schema with a default is treated as its own root.
        _check_version(self._root, SchemaError)
        validator = Validator(self._root)
        for schema in self._root.all():
            if schema.dynamic_ref:
                raise SchemaError(
                    f"jsonschema: {schema}: validate_defaults does not support dynamic refs"
                )
            if schema.default is not ABSENT:
                validator.validate(schema.default, schema, None)

    def __repr__(self) -> str:
        return f"Resolved({self._root})"


def _no_loader(uri: str) -> Schema:
    raise SchemaError("cannot resolve remote schemas: no loader passed to resolve")


class _Resolver:
    """State of one call to :func:`resolve`.

    Loaded schemas are cached by URI, so the loader is called at most once
    per URI and cycles of references terminate.
    """

    def __init__(self, loader: Loader) -> None:
        self._loader = loader
        self._loaded: dict[str, Resolved] = {}

    def resolve(self, schema: Schema, base_uri: str) -> Resolved:
        if urlsplit(base_uri).fragment:
            raise SchemaError(f"base URI {base_uri} must not have a fragment")
        check(schema)
        resolved = Resolved(schema, resolve_uris(schema, base_uri))
        # Record the schema before resolving its refs, or ref cycles recurse forever.
        self._loaded[base_uri] = resolved
        self._loaded[schema._uri or ""] = resolved
        self._resolve_refs(resolved)
        return resolved

    def _resolve_refs(self, resolved: Resolved) -> None:
        for schema in resolved.schema.all():
            if schema.ref:
                target, _ = self._resolve_ref(resolved, schema, schema.ref)
                # A $ref acts lexically even when it names a dynamic anchor.
                schema._resolved_ref = target
            if schema.dynamic_ref:
                target, fragment = self._resolve_ref(resolved, schema, schema.dynamic_ref)
                if fragment:
                    # Resolved against the dynamic scope at validation time.
                    schema._dynamic_ref_anchor = fragment
                else:
                    schema._resolved_dynamic_ref = target

    def _resolve_ref(
        self, resolved: Resolved, schema: Schema, ref: str
    ) -> tuple[Schema, str]:
        base = schema._base
        base_uri = base._uri if base is not None and base._uri else ""
        try:
            full = urljoin(base_uri, ref)
        except ValueError as err:
            raise SchemaError(f"reference {ref}: {err}") from err
        fragless, raw_fragment = urldefrag(full)
        fragment = unquote(raw_fragment)

        referenced = resolved.resolved_uris.get(fragless)
        if referenced is None:
            loaded = self._loaded.get(fragless)
            if loaded is not None:
                referenced = loaded.schema
            else:
                try:
                    remote = self._loader(fragless)
                except Exception as err:
                    raise SchemaError(f"loading {fragless}: {err}") from err
                referenced = self.resolve(remote, fragless).schema

        # An anchor is non-empty and has no slash; anything else is a JSON Pointer.
        if fragment and not fragment.startswith("/"):
            info = (referenced._anchors or {}).get(fragment)
            if info is None:
                raise SchemaError(f"no anchor {_q(fragment)} in {schema}")
            return info.schema, fragment if info.dynamic else ""
        try:
            return dereference(referenced, fragment), ""
        except PointerError as err:
            raise SchemaError(str(err)) from err


def resolve(schema: Schema, options: ResolveOptions | None = None) -> Resolved:
    """Check schema and resolve all its references.

    Raises SchemaError if the schema is malformed, was already resolved, or
    has a reference that cannot be resolved, and ValidationError if
    ``validate_defaults`` is set and a default does not satisfy its schema.
    """
    if schema._path:
        raise SchemaError(f"jsonschema: Resolve: {schema} already resolved")
    opts = options if options is not None else ResolveOptions()
    try:
        urlsplit(opts.base_uri)
    except ValueError as err:
        raise SchemaError(f"parsing base URI: {err}") from err
    resolver = _Resolver(opts.loader or _no_loader)
    resolved = resolver.resolve(schema, opts.base_uri)
    if opts.validate_defaults:
        resolved._validate_defaults()
    return resolved
"""Extension registry with anchor-based ordering.

Extensions are registered once, while a renderer is being built. Each
extension names the kind of rule it provides and, optionally, an anchor: an
existing rule it wants to sit immediately before or after. The builder
validates anchors as they are registered, and build() runs a single
resolution pass that turns the anchors into a total order per kind.

Thread Safety:
ExtensionRegistry is immutable after creation. Safe to share.
Use ExtensionRegistryBuilder for mutable construction.

Example:
    >>> md = MarkdownIt("default")
    >>> builder = ExtensionRegistryBuilder(md)
    >>> builder.register(Extension(
    ...     name="math_inline",
    ...     kind=ExtensionKind.INLINE_RULE,
    ...     handler=math_inline,
    ...     anchor=Anchor("escape"),
    ... ))
    >>> registry = builder.build()
    >>> registry.install(md)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from previewmark.errors import ConfigurationError
from previewmark.utils.logger import get_logger

if TYPE_CHECKING:
    from markdown_it import MarkdownIt
    from markdown_it.rules_core import StateCore

logger = get_logger(__name__)

ATTRIBUTE_DECORATOR_RULE = "attribute_decorators"


class ExtensionKind(Enum):
    """Where an extension plugs into the pipeline."""

    INLINE_RULE = "inline_rule"
    BLOCK_RULE = "block_rule"
    CORE_RULE = "core_rule"
    ATTRIBUTE_DECORATOR = "attribute_decorator"
    RENDER_OVERRIDE = "render_override"


class Position(Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True, slots=True)
class Anchor:
    """Named insertion point relative to another rule."""

    rule: str
    position: Position = Position.AFTER


@dataclass(frozen=True, slots=True)
class Extension:
    """A single syntax or render extension.

    Attributes:
        name: Rule name, unique within its kind
        kind: Rule chain (or render table) the extension belongs to
        handler: Rule function with the markdown-it signature for its kind;
            attribute decorators are called as ``handler(tokens, idx, env)``
        anchor: Optional insertion point; None appends to the chain
        alt: Block rule chains this rule may terminate (block rules only)
        target: Token type handled by a render override (defaults to name)

    """

    name: str
    kind: ExtensionKind
    handler: Callable[..., Any]
    anchor: Anchor | None = None
    alt: tuple[str, ...] = ()
    target: str | None = None

    @property
    def token_type(self) -> str:
        return self.target or self.name


def _base_rules(md: MarkdownIt, kind: ExtensionKind) -> list[str]:
    """Rule names markdown-it already provides for a kind."""
    if kind is ExtensionKind.INLINE_RULE:
        return list(md.inline.ruler.get_all_rules())
    if kind is ExtensionKind.BLOCK_RULE:
        return list(md.block.ruler.get_all_rules())
    if kind is ExtensionKind.CORE_RULE:
        return list(md.core.ruler.get_all_rules())
    return []


class ExtensionRegistry:
    """Immutable, resolved set of extensions.

    Holds the effective order of rule names per kind (base rules included)
    and the extension objects in that order.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = ("_order", "_by_kind")

    def __init__(
        self,
        order: dict[ExtensionKind, tuple[str, ...]],
        by_kind: dict[ExtensionKind, tuple[Extension, ...]],
    ) -> None:
        """Initialize registry with pre-resolved order.

        Use ExtensionRegistryBuilder to create instances.
        """
        self._order = order
        self._by_kind = by_kind

    def resolve(self) -> dict[ExtensionKind, tuple[str, ...]]:
        """Effective ordered rule names per kind."""
        return dict(self._order)

    def extensions(self, kind: ExtensionKind) -> tuple[Extension, ...]:
        """Extensions of one kind in resolved order."""
        return self._by_kind.get(kind, ())

    def get(self, kind: ExtensionKind, name: str) -> Extension | None:
        for extension in self.extensions(kind):
            if extension.name == name:
                return extension
        return None

    @property
    def names(self) -> frozenset[str]:
        """Names of all registered extensions."""
        return frozenset(ext.name for exts in self._by_kind.values() for ext in exts)

    def __len__(self) -> int:
        return sum(len(exts) for exts in self._by_kind.values())

    def install(self, md: MarkdownIt) -> MarkdownIt:
        """Insert every extension into ``md`` in resolved order.

        Each rule is inserted right after its predecessor in the resolved
        order, so the markdown-it chains end up matching resolve() exactly.
        A rule heading the chain goes before the first base rule, which is
        always present in the ruler.

        Returns:
            The same MarkdownIt instance, for chaining
        """
        rulers = {
            ExtensionKind.INLINE_RULE: md.inline.ruler,
            ExtensionKind.BLOCK_RULE: md.block.ruler,
            ExtensionKind.CORE_RULE: md.core.ruler,
        }
        for kind, ruler in rulers.items():
            order = self._order.get(kind, ())
            handlers = {ext.name: ext for ext in self.extensions(kind)}
            for i, name in enumerate(order):
                extension = handlers.get(name)
                if extension is None:
                    continue
                options = {"alt": list(extension.alt)} if extension.alt else None
                if i > 0:
                    ruler.after(order[i - 1], name, extension.handler, options)
                    continue
                base = next((rule for rule in order if rule not in handlers), None)
                if base is None:
                    ruler.push(name, extension.handler, options)
                else:
                    ruler.before(base, name, extension.handler, options)

        decorators = self.extensions(ExtensionKind.ATTRIBUTE_DECORATOR)
        if decorators:
            md.core.ruler.push(ATTRIBUTE_DECORATOR_RULE, _decorator_rule(decorators))

        for extension in self.extensions(ExtensionKind.RENDER_OVERRIDE):
            md.add_render_rule(extension.token_type, extension.handler)

        return md


def _decorator_rule(decorators: tuple[Extension, ...]) -> Callable[[StateCore], None]:
    """Build the core rule that runs attribute decorators in order."""

    def apply_decorators(state: StateCore) -> None:
        tokens = state.tokens
        for extension in decorators:
            for idx in range(len(tokens)):
                extension.handler(tokens, idx, state.env)

    return apply_decorators


class ExtensionRegistryBuilder:
    """Mutable builder for ExtensionRegistry.

    Register extensions (and third-party markdown-it plugins via use()),
    then call build() to resolve anchors into an immutable registry.

    Example:
        >>> builder = ExtensionRegistryBuilder(md)
        >>> builder.use(footnote_plugin)
        >>> builder.register(Extension("mark", ExtensionKind.INLINE_RULE, mark,
        ...                            anchor=Anchor("emphasis", Position.BEFORE)))
        >>> registry = builder.build()
    """

    __slots__ = ("_md", "_extensions", "_names", "_targets")

    def __init__(self, md: MarkdownIt) -> None:
        """Initialize builder against the parser whose rules act as anchors."""
        self._md = md
        self._extensions: list[Extension] = []
        self._names: dict[ExtensionKind, set[str]] = {kind: set() for kind in ExtensionKind}
        self._targets: dict[str, str] = {}

    @property
    def md(self) -> MarkdownIt:
        return self._md

    def use(self, plugin: Callable[..., None], **options: Any) -> ExtensionRegistryBuilder:
        """Apply a third-party markdown-it plugin.

        Rules added by the plugin become valid anchors for extensions
        registered afterwards.

        Returns:
            Self for chaining
        """
        self._md.use(plugin, **options)
        return self

    def register(self, extension: Extension) -> ExtensionRegistryBuilder:
        """Register an extension.

        Args:
            extension: Extension to add to the pipeline

        Returns:
            Self for chaining

        Raises:
            ConfigurationError: If the name is taken, the anchor is unknown,
                or a render override conflicts with an earlier one
        """
        kind = extension.kind
        name = extension.name

        if name in self._names[kind] or name in _base_rules(self._md, kind):
            raise ConfigurationError(f"{kind.value} '{name}' is already registered", name)

        if kind is ExtensionKind.RENDER_OVERRIDE:
            if extension.anchor is not None:
                raise ConfigurationError("Render overrides cannot be anchored", name)
            target = extension.token_type
            if target in self._targets:
                raise ConfigurationError(
                    f"Token type '{target}' is already rendered by '{self._targets[target]}'",
                    name,
                )
            self._targets[target] = name
        elif extension.anchor is not None:
            anchor = extension.anchor.rule
            if anchor not in self._names[kind] and anchor not in _base_rules(self._md, kind):
                raise ConfigurationError(f"Unknown {kind.value} anchor '{anchor}'", name)

        if extension.alt and kind is not ExtensionKind.BLOCK_RULE:
            raise ConfigurationError("Only block rules accept an alt chain", name)

        self._names[kind].add(name)
        self._extensions.append(extension)
        return self

    def register_all(self, extensions: Iterable[Extension]) -> ExtensionRegistryBuilder:
        """Register multiple extensions in order.

        Returns:
            Self for chaining
        """
        for extension in extensions:
            self.register(extension)
        return self

    def build(self) -> ExtensionRegistry:
        """Resolve anchors and build an immutable registry.

        Returns:
            Immutable ExtensionRegistry
        """
        order: dict[ExtensionKind, tuple[str, ...]] = {}
        by_kind: dict[ExtensionKind, tuple[Extension, ...]] = {}

        for kind in ExtensionKind:
            extensions = [ext for ext in self._extensions if ext.kind is kind]
            if kind is ExtensionKind.RENDER_OVERRIDE:
                resolved = [ext.name for ext in extensions]
            else:
                resolved = _resolve_order(_base_rules(self._md, kind), extensions)
            lookup = {ext.name: ext for ext in extensions}
            order[kind] = tuple(resolved)
            by_kind[kind] = tuple(lookup[name] for name in resolved if name in lookup)
            if extensions:
                logger.debug("Resolved %s order: %s", kind.value, ", ".join(resolved))

        return ExtensionRegistry(order=order, by_kind=by_kind)

    def __len__(self) -> int:
        """Number of registered extensions."""
        return len(self._extensions)


def _resolve_order(base: list[str], extensions: list[Extension]) -> list[str]:
    """Merge anchored extensions into a base rule order.

    Extensions are placed in registration order. An extension anchored
    after X goes past X and past every earlier extension chained to X on
    that side (anchored to X, or to something already chained to X); one
    anchored before X goes ahead of X and ahead of the same chain on the
    other side. The first registered extension therefore stays closest to
    its anchor, and earlier extensions keep their own neighbours.
    """
    order = list(base)
    anchors: dict[str, Anchor] = {}

    for extension in extensions:
        anchor = extension.anchor
        if anchor is None:
            order.append(extension.name)
            continue

        idx = order.index(anchor.rule)
        if anchor.position is Position.AFTER:
            run = _anchored_run(order, anchors, idx + 1, 1)
            idx += 1 + len(_chained_to(anchor.rule, run, anchors))
        else:
            run = _anchored_run(order, anchors, idx - 1, -1)
            idx -= len(_chained_to(anchor.rule, run, anchors))

        order.insert(idx, extension.name)
        anchors[extension.name] = anchor

    return order


def _anchored_run(order: list[str], anchors: dict[str, Anchor], start: int, step: int) -> list[str]:
    """Consecutive anchored extensions walking from ``start`` by ``step``."""
    run = []
    idx = start
    while 0 <= idx < len(order) and order[idx] in anchors:
        run.append(order[idx])
        idx += step
    return run


def _chained_to(rule: str, run: list[str], anchors: dict[str, Anchor]) -> set[str]:
    """Members of ``run`` anchored to ``rule`` directly or through each other.

    These always sit at the start of the run, next to ``rule``.
    """
    chained = {rule}
    changed = True
    while changed:
        changed = False
        for name in run:
            if name not in chained and anchors[name].rule in chained:
                chained.add(name)
                changed = True
    chained.discard(rule)
    return chained


__all__ = [
    "ATTRIBUTE_DECORATOR_RULE",
    "Anchor",
    "Extension",
    "ExtensionKind",
    "ExtensionRegistry",
    "ExtensionRegistryBuilder",
    "Position",
]

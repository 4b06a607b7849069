"""Variant availability resolution.

Pure functions over a product's variants and a shopper's partial selection.
Nothing here touches the database: callers pass in variants (model instances
or any object exposing ``id``, ``size``, ``color``, ``stock`` and
``is_active``) and the quantities already held in the cart.

Scenarios are derived from which axes vary across the variants:

- ``stock-only``: no size and no color; a single implicit variant.
- ``size-only`` / ``color-only``: every variant uses exactly that axis.
- ``size-and-color``: both axes are used.  Catalogs with inconsistent axis
  usage (some variants sized, some not) also land here; an empty field then
  only matches an empty selection.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple


class VariantScenario(str, enum.Enum):
    STOCK_ONLY = "stock-only"
    SIZE_ONLY = "size-only"
    COLOR_ONLY = "color-only"
    SIZE_AND_COLOR = "size-and-color"

    @property
    def uses_size(self) -> bool:
        return self in (VariantScenario.SIZE_ONLY, VariantScenario.SIZE_AND_COLOR)

    @property
    def uses_color(self) -> bool:
        return self in (VariantScenario.COLOR_ONLY, VariantScenario.SIZE_AND_COLOR)


@dataclass(frozen=True)
class Selection:
    size: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def of(cls, size: Optional[str] = None, color: Optional[str] = None) -> "Selection":
        return cls(size=_norm(size) or None, color=_norm(color) or None)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a selection against a product's variants."""

    scenario: VariantScenario
    variant: Optional[Any]
    complete: bool
    missing_axes: Tuple[str, ...] = ()
    sizes: Tuple[str, ...] = ()
    colors: Tuple[str, ...] = ()
    disabled_sizes: Tuple[str, ...] = ()
    disabled_colors: Tuple[str, ...] = ()
    in_cart: int = 0
    addable_quantity: int = 0
    messages: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def can_add(self) -> bool:
        return self.addable_quantity > 0


def _norm(value: Optional[str]) -> str:
    return (value or "").strip()


def _is_available(variant: Any) -> bool:
    return bool(variant.is_active) and variant.stock > 0


def _distinct(values: Iterable[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


def classify_scenario(variants: Sequence[Any]) -> VariantScenario:
    """Classify the product by which axes its variants use."""
    sized = [bool(_norm(v.size)) for v in variants]
    colored = [bool(_norm(v.color)) for v in variants]

    has_size, has_color = any(sized), any(colored)
    if not has_size and not has_color:
        return VariantScenario.STOCK_ONLY
    if has_size and not has_color and all(sized):
        return VariantScenario.SIZE_ONLY
    if has_color and not has_size and all(colored):
        return VariantScenario.COLOR_ONLY
    return VariantScenario.SIZE_AND_COLOR


def _matches(variant: Any, scenario: VariantScenario, selection: Selection) -> bool:
    if scenario.uses_size and _norm(variant.size) != _norm(selection.size):
        return False
    if scenario.uses_color and _norm(variant.color) != _norm(selection.color):
        return False
    return True


def find_variant(
    variants: Sequence[Any],
    selection: Selection,
    scenario: Optional[VariantScenario] = None,
) -> Optional[Any]:
    """Return the variant matching the full selection, or ``None``."""
    scenario = scenario or classify_scenario(variants)
    if scenario is VariantScenario.STOCK_ONLY:
        active = [v for v in variants if v.is_active]
        candidates = active or list(variants)
        return candidates[0] if candidates else None
    for variant in variants:
        if _matches(variant, scenario, selection):
            return variant
    return None


def disabled_sizes(
    variants: Sequence[Any],
    selection: Selection,
    scenario: Optional[VariantScenario] = None,
) -> Tuple[str, ...]:
    """Sizes for which no in-stock active variant matches the chosen color."""
    scenario = scenario or classify_scenario(variants)
    color = selection.color if scenario.uses_color else None
    disabled = []
    for size in _distinct(_norm(v.size) for v in variants):
        candidates = [
            v
            for v in variants
            if _norm(v.size) == size and (color is None or _norm(v.color) == color)
        ]
        if not any(_is_available(v) for v in candidates):
            disabled.append(size)
    return tuple(disabled)


def disabled_colors(
    variants: Sequence[Any],
    selection: Selection,
    scenario: Optional[VariantScenario] = None,
) -> Tuple[str, ...]:
    """Colors for which no in-stock active variant matches the chosen size."""
    scenario = scenario or classify_scenario(variants)
    size = selection.size if scenario.uses_size else None
    disabled = []
    for color in _distinct(_norm(v.color) for v in variants):
        candidates = [
            v
            for v in variants
            if _norm(v.color) == color and (size is None or _norm(v.size) == size)
        ]
        if not any(_is_available(v) for v in candidates):
            disabled.append(color)
    return tuple(disabled)


def resolve(
    variants: Sequence[Any],
    selection: Selection,
    in_cart: Optional[Mapping[str, int]] = None,
) -> Resolution:
    """Resolve *selection* into a concrete variant plus option availability.

    ``in_cart`` maps variant ids (as strings) to quantities the shopper
    already holds; the addable quantity of the resolved variant is its live
    stock minus that amount.
    """
    variants = list(variants)
    in_cart = in_cart or {}
    scenario = classify_scenario(variants)

    missing: List[str] = []
    if scenario.uses_size and selection.size is None:
        missing.append("size")
    if scenario.uses_color and selection.color is None:
        missing.append("color")

    variant = find_variant(variants, selection, scenario)
    messages: List[str] = []
    held = 0
    addable = 0
    if variant is not None:
        held = int(in_cart.get(str(variant.id), 0))
        if not variant.is_active:
            messages.append("This option is no longer available.")
        else:
            addable = max(variant.stock - held, 0)
            if variant.stock == 0:
                messages.append("Out of stock.")
            elif addable == 0:
                messages.append(
                    f"You already have all {variant.stock} available in your cart."
                )
    elif missing:
        messages.append(f"Select a {' and '.join(missing)}.")
    else:
        messages.append("This combination is not available.")

    return Resolution(
        scenario=scenario,
        variant=variant,
        complete=variant is not None,
        missing_axes=tuple(missing) if variant is None else (),
        sizes=_distinct(_norm(v.size) for v in variants) if scenario.uses_size else (),
        colors=_distinct(_norm(v.color) for v in variants) if scenario.uses_color else (),
        disabled_sizes=(
            disabled_sizes(variants, selection, scenario) if scenario.uses_size else ()
        ),
        disabled_colors=(
            disabled_colors(variants, selection, scenario)
            if scenario.uses_color
            else ()
        ),
        in_cart=held,
        addable_quantity=addable,
        messages=tuple(messages),
    )

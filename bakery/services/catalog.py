"""
Catalog loading and rule-set integrity checks.

The catalog is fetched by the surrounding application; this module only
turns raw rows into ``Product`` models. A product whose rule set is
malformed keeps selling at its base price with no tiers.
"""
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from pydantic import ValidationError

from bakery.logging import get_logger, sanitize_id_for_logging
from bakery.services.models import PriceRule, Product

logger = get_logger(__name__)


class Catalog(Protocol):
    """Read-only product lookup supplied by the application."""

    def get_product(self, product_id: str) -> Optional[Product]:
        ...


def check_rule_set(rules: Sequence[PriceRule]) -> List[str]:
    """
    Return every integrity problem found in a product's rule set.

    An empty list means the rule set is usable as-is.
    """
    problems: List[str] = []

    for index, rule in enumerate(rules):
        if rule.max_qty is not None and rule.max_qty < rule.min_qty:
            problems.append(f"rule {index}: max_qty {rule.max_qty} is below min_qty {rule.min_qty}")
        if rule.is_bracket and rule.is_incremental:
            problems.append(f"rule {index}: has both a flat price and an extra per unit price")
        elif not rule.is_bracket and not rule.is_incremental:
            problems.append(f"rule {index}: has neither a flat price nor an extra per unit price")

    brackets = sorted(
        (r for r in rules if r.is_bracket and not r.is_incremental),
        key=lambda r: r.min_qty,
    )
    for previous, current in zip(brackets, brackets[1:]):
        if previous.max_qty is None or current.min_qty <= previous.max_qty:
            upper = "unbounded" if previous.max_qty is None else previous.max_qty
            problems.append(
                f"bracket {previous.min_qty}-{upper} overlaps bracket starting at {current.min_qty}"
            )

    incremental = [r for r in rules if r.is_incremental and not r.is_bracket]
    if len(incremental) > 1:
        problems.append(f"{len(incremental)} incremental rules defined, expected at most one")

    return problems


def load_product(data: dict) -> Product:
    """
    Build a Product from a catalog row.

    Rule-set problems are logged and the tiers dropped; a row that is not a
    product at all (missing id, name or price) raises ValidationError.
    """
    raw_rules = data.get("product_quantity_rules", data.get("quantity_rules")) or []
    product_id = sanitize_id_for_logging(data.get("id"))

    try:
        rules = [r if isinstance(r, PriceRule) else PriceRule.model_validate(r) for r in raw_rules]
        problems = check_rule_set(rules)
    except ValidationError as e:
        rules = []
        problems = [f"unreadable rule: {e.error_count()} validation error(s)"]

    if problems:
        logger.warning(
            f"Malformed rule set for product {product_id}, using base price: {'; '.join(problems)}"
        )
        rules = []

    row = {k: v for k, v in data.items() if k not in ("product_quantity_rules", "quantity_rules")}
    return Product.model_validate({**row, "product_quantity_rules": rules})


class InMemoryCatalog:
    """Catalog backed by rows already fetched from the backend."""

    def __init__(self, rows: Iterable[dict] = ()):
        self._products: Dict[str, Product] = {}
        for row in rows:
            try:
                product = load_product(row)
            except ValidationError as e:
                logger.warning(
                    f"Skipping catalog row {sanitize_id_for_logging(row.get('id'))}: {e.error_count()} validation error(s)"
                )
                continue
            self._products[product.id] = product

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def products(self) -> List[Product]:
        return list(self._products.values())

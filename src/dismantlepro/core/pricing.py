from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from dismantlepro.types import AccessorialCharge, CostField, EquipmentBlock


def money(value: float) -> float:
    return round(float(value), 2)


@dataclass(slots=True)
class LineItem:
    description: str
    unit_rate: float
    quantity: int
    total: float
    cost_field: str | None = None


@dataclass(slots=True)
class BlockPricing:
    cost_subtotal: float
    misc_fees_total: float
    block_subtotal: float
    quantity: int
    total: float
    line_items: list[LineItem] = field(default_factory=list)


@dataclass(slots=True)
class QuoteTotals:
    blocks: list[BlockPricing]
    subtotal: float
    margin_percentage: float
    margin_amount: float
    inland_total: float
    total: float

    @property
    def line_items(self) -> list[LineItem]:
        return [item for block in self.blocks for item in block.line_items]


@dataclass(slots=True)
class InlandTotals:
    line_haul_total: float
    fuel_surcharge_amount: float
    accessorial_total: float
    subtotal: float
    margin_amount: float
    total: float
    line_items: list[LineItem] = field(default_factory=list)


def effective_cost(
    cost_field: CostField,
    costs: dict[CostField, float | None],
    overrides: dict[CostField, float | None] | None = None,
) -> float | None:
    """Override wins over the schedule value whenever it is set, zero included."""
    if overrides and overrides.get(cost_field) is not None:
        return overrides[cost_field]
    return costs.get(cost_field)


def is_cost_enabled(cost_field: CostField, enabled_costs: dict[CostField, bool]) -> bool:
    return enabled_costs.get(cost_field, True)


def price_block(block: EquipmentBlock) -> BlockPricing:
    cost_subtotal = 0.0
    line_items: list[LineItem] = []
    suffix = ""
    if block.quantity > 1:
        suffix = f" - {block.make_name} {block.model_name} (×{block.quantity})"

    for cost_field in CostField:
        if not is_cost_enabled(cost_field, block.enabled_costs):
            continue
        value = effective_cost(cost_field, block.costs, block.cost_overrides)
        if value is None or value <= 0:
            continue
        cost_subtotal += value
        description = block.cost_descriptions.get(cost_field) or cost_field.label
        line_items.append(
            LineItem(
                description=description + suffix,
                unit_rate=money(value),
                quantity=block.quantity,
                total=money(value * block.quantity),
                cost_field=cost_field.value,
            )
        )

    misc_total = 0.0
    for fee in block.miscellaneous_fees:
        amount = cost_subtotal * fee.amount / 100 if fee.is_percentage else fee.amount
        if amount <= 0:
            continue
        misc_total += amount
        line_items.append(
            LineItem(
                description=fee.title + (f" ({fee.amount:g}%)" if fee.is_percentage else ""),
                unit_rate=money(amount),
                quantity=block.quantity,
                total=money(amount * block.quantity),
            )
        )

    block_subtotal = cost_subtotal + misc_total
    return BlockPricing(
        cost_subtotal=money(cost_subtotal),
        misc_fees_total=money(misc_total),
        block_subtotal=money(block_subtotal),
        quantity=block.quantity,
        total=money(block_subtotal * block.quantity),
        line_items=line_items,
    )


def price_quote(
    blocks: Iterable[EquipmentBlock],
    margin_percentage: float,
    inland_total: float = 0.0,
) -> QuoteTotals:
    if margin_percentage < 0:
        raise ValueError("margin_percentage cannot be negative")
    if inland_total < 0:
        raise ValueError("inland_total cannot be negative")

    priced = [price_block(block) for block in blocks]
    subtotal = money(sum(item.total for item in priced))
    margin_amount = money(subtotal * margin_percentage / 100)
    inland = money(inland_total)
    return QuoteTotals(
        blocks=priced,
        subtotal=subtotal,
        margin_percentage=margin_percentage,
        margin_amount=margin_amount,
        inland_total=inland,
        total=money(subtotal + margin_amount + inland),
    )


def price_inland(
    *,
    base_rate: float = 0.0,
    distance_miles: float | None = None,
    rate_per_mile: float = 0.0,
    fuel_surcharge_percent: float = 0.0,
    accessorial_charges: Iterable[AccessorialCharge] = (),
    margin_percentage: float = 0.0,
    manual_total: float | None = None,
) -> InlandTotals:
    for name, value in (
        ("base_rate", base_rate),
        ("rate_per_mile", rate_per_mile),
        ("fuel_surcharge_percent", fuel_surcharge_percent),
        ("margin_percentage", margin_percentage),
    ):
        if value < 0:
            raise ValueError(f"{name} cannot be negative")

    miles = distance_miles or 0.0
    line_haul = base_rate + miles * rate_per_mile
    fuel = line_haul * fuel_surcharge_percent / 100

    line_items: list[LineItem] = []
    if line_haul > 0:
        line_items.append(LineItem("Line Haul", money(line_haul), 1, money(line_haul)))
    if fuel > 0:
        line_items.append(
            LineItem(f"Fuel Surcharge ({fuel_surcharge_percent:g}%)", money(fuel), 1, money(fuel))
        )

    accessorial_total = 0.0
    for charge in accessorial_charges:
        unit = line_haul * charge.amount / 100 if charge.is_percentage else charge.amount
        amount = unit * charge.quantity
        if amount <= 0:
            continue
        accessorial_total += amount
        quantity = int(charge.quantity) if float(charge.quantity).is_integer() else 1
        line_items.append(LineItem(charge.name, money(unit), quantity, money(amount)))

    subtotal = line_haul + fuel + accessorial_total
    margin_amount = subtotal * margin_percentage / 100
    total = manual_total if manual_total is not None else subtotal + margin_amount
    return InlandTotals(
        line_haul_total=money(line_haul),
        fuel_surcharge_amount=money(fuel),
        accessorial_total=money(accessorial_total),
        subtotal=money(subtotal),
        margin_amount=money(margin_amount),
        total=money(total),
        line_items=line_items,
    )


def generate_quote_number(prefix: str = "QT", now: datetime | None = None) -> str:
    stamp = (now or datetime.now(UTC)).strftime("%Y%m%d")
    return f"{prefix.strip().upper() or 'QT'}-{stamp}-{random.randint(0, 9999):04d}"

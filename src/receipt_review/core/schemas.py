from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    # Precision must cover every integer digit plus two places, or quantize raises.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


class WireModel(BaseModel):
    """Base for values exchanged with callers: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenWireModel(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

"""Trade actions emitted by the decision core.

``TradeAction`` is a closed union; ``kind`` is the discriminator.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class BuyUp(_Action):
    kind: Literal["BuyUp"] = "BuyUp"
    price: Decimal
    shares: Decimal


class BuyDown(_Action):
    kind: Literal["BuyDown"] = "BuyDown"
    price: Decimal
    shares: Decimal


class SellUp(_Action):
    kind: Literal["SellUp"] = "SellUp"
    price: Decimal


class SellDown(_Action):
    kind: Literal["SellDown"] = "SellDown"
    price: Decimal


class NoAction(_Action):
    kind: Literal["NoAction"] = "NoAction"


TradeAction = Annotated[
    Union[BuyUp, BuyDown, SellUp, SellDown, NoAction],
    Field(discriminator="kind"),
]

from decimal import Decimal, ROUND_HALF_UP
from rest_framework import serializers

CENT = Decimal("0.01")


def to_decimal(x) -> Decimal:
    """Convert to Decimal safely (floats go through str to avoid binary noise)."""
    if x is None or x == "":
        return Decimal("0")
    return Decimal(str(x))


def round2(x) -> Decimal:
    """Round half-up to 2 decimal places, the precision every score is shown with."""
    return to_decimal(x).quantize(CENT, rounding=ROUND_HALF_UP)


class LabelChoiceField(serializers.ChoiceField):
    """
    Accepts either the stored value ("RANK_N_FILE") or its label
    ("Rank and File", any case); always returns the label.
    """
    def to_internal_value(self, data):
        data_str = str(data)
        if data_str in self.choices:
            return data_str
        # IntegerChoices keys arrive as strings from query params / form posts
        for key, label in self.choices.items():
            if str(key) == data_str or str(label).lower() == data_str.lower():
                return key
        self.fail("invalid_choice", input=data)

    def to_representation(self, value):
        if value in ("", None):
            return value
        return self.choices.get(value, super().to_representation(value))

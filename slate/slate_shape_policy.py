# slate/slate_shape_policy.py
from __future__ import annotations
from enum import Enum


class SlateShapePolicy(str, Enum):
    """
    How the core reacts to malformed shapes and values.

    - LENIENT => coerce and keep going:
                 bad dimensions are floored / clamped at 0,
                 missing cells read as 0.0,
                 dot() with mismatched inner dims returns zeros.
    - STRICT  => raise ShapeMismatchError / InvalidShapeError / InvalidValueError.

    LENIENT is the default everywhere, so a lesson never crashes mid-animation.
    """

    LENIENT = "lenient"
    STRICT = "strict"

    @staticmethod
    def from_value(val: str | SlateShapePolicy) -> SlateShapePolicy:
        """
        Accepts either:
            - a SlateShapePolicy enum value
            - or a string ("lenient", "strict")

        Converts and returns a SlateShapePolicy.
        """
        if isinstance(val, SlateShapePolicy):
            return val

        if isinstance(val, str):
            try:
                return SlateShapePolicy(val.strip().lower())
            except ValueError:
                pass

        raise ValueError(
            f"Unknown shape policy {val!r}: use 'lenient' to zero-fill mismatched "
            f"operands or 'strict' to raise ShapeMismatchError"
        )


LENIENT = SlateShapePolicy.LENIENT
STRICT = SlateShapePolicy.STRICT

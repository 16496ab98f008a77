"""
Validation functions for attrs.
"""
from attrs import define
from attrs.validators import in_

__all__ = ["in_", "range_", "non_negative"]


@define(repr=False, hash=True)
class _RangeValidator:
    minimum: float
    maximum: float

    def __call__(self, inst, attribute, value) -> None:
        try:
            in_range = self.minimum <= value <= self.maximum
        except TypeError:
            in_range = False

        if not in_range:
            raise ValueError(
                "'{name}' must be in range [{minimum!r}, {maximum!r}]: {value!r}".format(
                    name=attribute.name,
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self) -> str:
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def range_(minimum: float, maximum: float) -> _RangeValidator:
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``
    """
    return _RangeValidator(minimum, maximum)


def non_negative(value: float) -> float:
    """Converter clamping negative numbers to zero."""
    return max(0.0, float(value))

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")


def to_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: object) -> float:
    return float(to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def percentage(part: object, whole: object) -> float:
    """``part / whole * 100`` to two places; a zero ``whole`` yields 0."""
    denominator = to_decimal(whole)
    if denominator == 0:
        return 0.0
    return round_half_up(to_decimal(part) / denominator * 100)


def growth_rate(current: object, previous: object) -> float:
    baseline = to_decimal(previous)
    if baseline == 0:
        return 0.0
    return round_half_up((to_decimal(current) - baseline) / baseline * 100)


def ratio(numerator: int, denominator: int) -> float | None:
    if denominator == 0:
        return None
    return round_half_up(Decimal(numerator) / Decimal(denominator))

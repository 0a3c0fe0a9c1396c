"""Coin reward calculation."""

from decimal import Decimal, ROUND_HALF_UP

from src.models.settings import SystemSettings


def calculate_coins_reward(difficulty: int, base: float, multiplier: float) -> int:
    """
    Coins for a task: difficulty * base * multiplier, rounded to the nearest
    integer with halves rounded up.
    """
    # str() drops float noise such as 60.00000000000001 before rounding
    raw = Decimal(str(difficulty * base * multiplier))
    return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def reward_for_settings(difficulty: int, settings: SystemSettings) -> int:
    """Coins for a task under the given settings."""
    return calculate_coins_reward(
        difficulty,
        settings.task_completion_base,
        settings.complexity_multiplier,
    )

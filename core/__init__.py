"""
Core Layer - 纯轮抽数据 (无评分逻辑)

Modules:
    colors: 颜色组合代数
    cards: 卡牌与卡池
    state: 轮抽状态
"""
from .colors import (
    COLORS,
    BASICS,
    FETCH_LANDS,
    COLOR_COMBINATIONS,
    NUM_COMBINATIONS,
    combination_index,
    combination_colors,
    includes,
    intersects,
    consider_in_combination,
    is_playable_land,
)

from .cards import (
    EMBEDDING_DIM,
    DraftCard,
    CardUniverse,
    elo_to_value,
)

from .state import (
    DrafterState,
    BotState,
)

__all__ = [
    # colors
    "COLORS",
    "BASICS",
    "FETCH_LANDS",
    "COLOR_COMBINATIONS",
    "NUM_COMBINATIONS",
    "combination_index",
    "combination_colors",
    "includes",
    "intersects",
    "consider_in_combination",
    "is_playable_land",
    # cards
    "EMBEDDING_DIM",
    "DraftCard",
    "CardUniverse",
    "elo_to_value",
    # state
    "DrafterState",
    "BotState",
]

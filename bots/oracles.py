"""
Oracle 集合

每个 oracle 是一个独立加权的启发式:
- 权重由 (包进度, 包内选牌进度) 在粗粒度权重网格上插值得到
- 值由 BotState 纯函数计算

总分 = sum(权重 * 值)
"""
from dataclasses import dataclass, field
from math import floor
from typing import Callable, Dict, Sequence, Tuple

import numpy as np

from core.state import BotState, DrafterState
from .config import MAX_SCORE
from .synergy import dot_product, sum_embeddings


def _axis_position(length: int, coordinate: float, max_coordinate: float) -> Tuple[int, int, float]:
    """
    坐标在某一轴上的位置

    Returns:
        (floor 下标, ceil 下标, ceil 的权重)
    """
    if max_coordinate <= 0:
        return 0, 0, 0.0
    index = max(0.0, length * coordinate / max_coordinate)
    floor_index = floor(index)
    ceil_index = floor_index + 1 if index > floor_index else floor_index
    # 落在网格点上，或越过末端不足 1 格时直接取 floor
    if index == floor_index or ceil_index >= length:
        clamped = min(floor_index, length - 1)
        return clamped, clamped, 0.0
    return floor_index, ceil_index, index - floor_index


def interpolate_weight(weights, coordinates: Sequence[Tuple[float, float]]) -> float:
    """
    网格插值

    weights 视为 N 维网格，逐轴处理: 落在网格点上直接取值，否则按小数部分
    对相邻两点线性混合

    Args:
        weights: N 维权重表 (嵌套列表或数组)
        coordinates: 每一轴的 (坐标, 坐标最大值)

    Returns:
        插值后的权重，空表返回 0
    """
    grid = np.asarray(weights, dtype=np.float64)
    if grid.size == 0:
        return 0.0
    for coordinate, max_coordinate in coordinates:
        if grid.ndim == 0:
            break
        lo, hi, frac = _axis_position(grid.shape[0], coordinate, max_coordinate)
        if frac == 0.0:
            grid = grid[lo]
        else:
            grid = frac * grid[hi] + (1.0 - frac) * grid[lo]
    return float(grid) if grid.ndim == 0 else float(grid.flat[0])


def calculate_weight(weights, state: DrafterState) -> float:
    """按 (pack_num / num_packs, pick_num / pack_size) 插值"""
    return interpolate_weight(
        weights,
        ((state.pack_num, state.num_packs), (state.pick_num, state.pack_size)),
    )


def sum_weighted_ratings(indices: Sequence[int], state: BotState) -> float:
    """
    按施放概率加权的平均评分值，上限 MAX_SCORE

    空列表返回 0
    """
    if len(indices) == 0:
        return 0.0
    idx = np.asarray(indices, dtype=np.int64)
    total = float(np.dot(state.probabilities[idx], state.cards.values[idx]))
    return min(MAX_SCORE, total / len(indices))


# 各 oracle 的值函数

def rating_value(state: BotState) -> float:
    # 候选卡牌本身的强度
    return sum_weighted_ratings(state.card_indices, state)


def pick_synergy_value(state: BotState) -> float:
    # 候选卡牌与已选卡牌的协同
    total = state.total_probability
    count = len(state.card_indices)
    if total <= 0 or count == 0:
        return 0.0
    candidates = sum_embeddings(state.cards, state.card_indices, state.probabilities)
    return MAX_SCORE * dot_product(candidates, state.pool_embedding) / total / count


def internal_synergy_value(state: BotState) -> float:
    # 每张已选卡牌与其余卡牌 Pick Synergy 的加权平均，每个无序对计两次
    total = state.total_probability
    size = len(state.picked) + len(state.basics)
    if total <= 0 or size <= 1:
        return 0.0
    return 2 * MAX_SCORE * dot_product(state.pool_embedding, state.pool_embedding) / (size - 1) / total


def colors_value(state: BotState) -> float:
    # 已选卡牌在当前颜色下的强度
    return sum_weighted_ratings(state.picked, state) + sum_weighted_ratings(state.basics, state)


def openness_value(state: BotState) -> float:
    # 已见过的卡牌在当前颜色下的强度，反映颜色是否开放
    return sum_weighted_ratings(state.seen, state)


@dataclass(frozen=True)
class Oracle:
    """
    独立加权的启发式

    Attributes:
        title: 名称
        tooltip: 说明文字 (界面展示，需原样保留)
        per_considered_card: 是否评估候选卡牌 (否则只评估已有卡池)
        weights: (包进度, 选牌进度) 权重表
        compute_value: BotState -> 值
    """
    title: str
    tooltip: str
    per_considered_card: bool
    weights: Tuple[Tuple[float, ...], ...] = field(repr=False)
    compute_value: Callable[[BotState], float] = field(repr=False, compare=False)

    def compute_weight(self, state: DrafterState) -> float:
        return calculate_weight(self.weights, state)


def _constant_rows(*values: float, width: int = 15) -> Tuple[Tuple[float, ...], ...]:
    return tuple(tuple([float(v)] * width) for v in values)


ORACLES: Tuple[Oracle, ...] = (
    Oracle(
        title="Rating",
        tooltip="The rating based on the elo and current color commitments.",
        per_considered_card=True,
        weights=_constant_rows(10, 8, 6),
        compute_value=rating_value,
    ),
    Oracle(
        title="Pick Synergy",
        tooltip="A score of how well this card synergizes with the current picks.",
        per_considered_card=True,
        weights=_constant_rows(6, 8, 10),
        compute_value=pick_synergy_value,
    ),
    Oracle(
        title="Internal Synergy",
        tooltip="A score of how well current picks in these colors synergize with each other.",
        per_considered_card=False,
        weights=_constant_rows(5, 10, 15),
        compute_value=internal_synergy_value,
    ),
    Oracle(
        title="Colors",
        tooltip="A score of how well these colors fit in with the current picks.",
        per_considered_card=False,
        weights=_constant_rows(15, 25, 30),
        compute_value=colors_value,
    ),
    Oracle(
        title="Openness",
        tooltip="A score of how open these colors appear to be.",
        per_considered_card=True,
        weights=(
            (4, 12, 12.3, 12.6, 13, 13.4, 13.7, 14, 15, 14.6, 14.2, 13.8, 13.4, 13, 12.6),
            (13, 12.6, 12.2, 11.8, 11.4, 11, 10.6, 10.2, 9.8, 9.4, 9, 8.6, 8.2, 7.8, 7),
            (8, 7.5, 7, 6.5, 6, 5.5, 5, 4.5, 4, 3.5, 3, 2.5, 2, 1.5, 1),
        ),
        compute_value=openness_value,
    ),
)

ORACLES_BY_NAME: Dict[str, Oracle] = {oracle.title: oracle for oracle in ORACLES}

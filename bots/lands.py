"""
地牌分布局部搜索

1. 统计可用地 (已选 + 候选 + 虚拟基本地)
2. 由种子生成不超过 17 张的初始分布
3. 首次上升 (first-ascent) 爬山: 每步接受第一个严格提升分数的 (增, 减) 转移
4. 用不同种子重启若干次，保留最高分
"""
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar
import logging

import numpy as np

from core.cards import CardUniverse
from core.colors import COLOR_COMBINATION_INCLUDES, NUM_COMBINATIONS
from .config import BotConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

# 评分结果类型，只要求有 score 属性
T = TypeVar("T")


def available_lands(
    cards: CardUniverse,
    pool: Sequence[int],
    basics: Sequence[int],
    basic_copies: int = 17,
) -> np.ndarray:
    """
    各颜色组合的可用地数量

    Args:
        cards: 卡池
        pool: 已选与候选卡牌下标
        basics: 虚拟基本地下标，每张计 basic_copies 次
        basic_copies: 每张基本地的计数

    Returns:
        (32,) 计数向量
    """
    result = np.zeros(NUM_COMBINATIONS, dtype=np.int64)
    for ci in pool:
        combination = cards.land_combinations[ci]
        if combination >= 0:
            result[combination] += 1
    for ci in basics:
        combination = cards.land_combinations[ci]
        if combination >= 0:
            result[combination] += basic_copies
    return result


def _minimal(indices: np.ndarray) -> np.ndarray:
    """不包含其他候选组合的组合 (可减少的真正候选)"""
    if len(indices) == 0:
        return indices
    sub = COLOR_COMBINATION_INCLUDES[np.ix_(indices, indices)]
    # 每行计数包含自身
    return indices[sub.sum(axis=1) == 1]


def _maximal(indices: np.ndarray) -> np.ndarray:
    """不被其他候选组合包含的组合 (可增加的真正候选)"""
    if len(indices) == 0:
        return indices
    sub = COLOR_COMBINATION_INCLUDES[np.ix_(indices, indices)]
    return indices[sub.sum(axis=0) == 1]


def random_lands(
    available: np.ndarray,
    seed: int = 0,
    max_lands: int = 17,
) -> np.ndarray:
    """
    由种子生成初始地牌分布

    从可用地出发，总数超过上限时逐张移除:
    无色组合优先；否则在不包含其他可减少组合的组合中，按种子洗牌取第一个

    Args:
        available: 可用地
        seed: 随机种子 (非负整数)
        max_lands: 地牌总数上限

    Returns:
        (32,) 初始分布
    """
    rng = np.random.default_rng(seed)
    current = np.array(available, dtype=np.int64)
    total = int(current.sum())
    while total > max_lands:
        if current[0] > 0:
            current[0] -= 1
        else:
            decreases = _minimal(np.flatnonzero(current > 0))
            removal = int(rng.permutation(decreases)[0])
            current[removal] -= 1
        total -= 1
    return current


def find_transitions(lands: np.ndarray, available: np.ndarray) -> List[Tuple[int, int]]:
    """
    枚举有效转移 (增加的组合, 减少的组合)

    - 增加: 未达到可用上限，且不被其他可增加组合包含
    - 减少: 当前数量 > 0，且不包含其他可减少组合
    - 增加的组合不能被减少的组合包含 (避免冗余移动)
    """
    increases = _maximal(np.flatnonzero(available > lands))
    decreases = _minimal(np.flatnonzero(lands > 0))
    return [
        (int(increase), int(decrease))
        for increase in increases
        for decrease in decreases
        if not COLOR_COMBINATION_INCLUDES[decrease, increase]
    ]


def derive_seed(
    pick_num: int,
    card_indices: Sequence[int],
    restart: int,
    config: BotConfig = DEFAULT_CONFIG,
) -> int:
    """
    第 restart 次重启的种子

    base_seed + pick_num + restart * stride + P，P 从 1 开始对每个候选下标 x 做 P += P * x
    """
    product = 1
    for x in card_indices:
        product += product * int(x)
    return config.base_seed + pick_num + restart * config.restart_seed_stride + product


class LandOptimizer:
    """
    地牌分布优化器

    评分函数由调用方提供: score_lands(lands) -> 带 score 属性的结果
    """

    def __init__(self, config: Optional[BotConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def search(
        self,
        lands: np.ndarray,
        available: np.ndarray,
        score_lands: Callable[[np.ndarray], T],
    ) -> T:
        """
        首次上升爬山

        Args:
            lands: 初始分布
            available: 可用地
            score_lands: 评分函数

        Returns:
            局部最优分布的评分结果
        """
        current_lands = np.array(lands, dtype=np.int64)
        current = score_lands(current_lands)
        steps = 0
        max_steps = self.config.max_search_steps

        while max_steps is None or steps < max_steps:
            improved = None
            for increase, decrease in find_transitions(current_lands, available):
                candidate_lands = current_lands.copy()
                candidate_lands[increase] += 1
                candidate_lands[decrease] -= 1
                candidate = score_lands(candidate_lands)
                if candidate.score > current.score:
                    improved = (candidate, candidate_lands)
                    break
            if improved is None:
                break
            current, current_lands = improved
            steps += 1

        logger.debug(f"Land search finished after {steps} steps, score {current.score:.4f}")
        return current

    def optimize(
        self,
        available: np.ndarray,
        pick_num: int,
        card_indices: Sequence[int],
        score_lands: Callable[[np.ndarray], T],
    ) -> T:
        """
        多起点搜索

        Args:
            available: 可用地
            pick_num: 选牌序号 (参与种子计算)
            card_indices: 候选卡牌 (参与种子计算)
            score_lands: 评分函数

        Returns:
            各次重启中分数最高的结果 (同分保留较早的)
        """
        best = None
        for restart in range(max(1, self.config.num_restarts)):
            seed = derive_seed(pick_num, card_indices, restart, self.config)
            initial = random_lands(available, seed, self.config.max_lands)
            result = self.search(initial, available, score_lands)
            logger.debug(f"Restart {restart} (seed {seed}): score {result.score:.4f}")
            if best is None or result.score > best.score:
                best = result
        return best

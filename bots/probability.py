"""
施放概率模型

给定地牌分布，估计每张卡牌能被施放的概率。模型可替换:
- always_castable: 缺省实现，所有卡牌概率为 1
- SourceCountCastingModel: 按颜色来源数的超几何近似
- MemoizedCastingModel: 以 (卡名, 地牌分布) 为键缓存任意模型

原始概率之后统一做凸惩罚，低概率卡牌被超线性压低
"""
from math import comb
import threading
from typing import Callable, Dict, Iterable, Sequence, Tuple

import numpy as np

from core.cards import CardUniverse, DraftCard
from core.colors import COLOR_COMBINATION_INTERSECTS, MONO_COLOR_INDICES, normalize_colors


# (卡牌, 地牌分布) -> [0, 1]
CastingProbabilityModel = Callable[[DraftCard, np.ndarray], float]

DEFAULT_DAMPENING: Tuple[Tuple[float, int], ...] = ((0.2, 5), (0.33, 3), (0.5, 2))


def always_castable(card: DraftCard, lands: np.ndarray) -> float:
    """缺省模型: 任意卡牌都可施放"""
    return 1.0


def pack_lands(lands: np.ndarray) -> bytes:
    """
    将地牌分布打包为定长键

    每个计数占 1 字节，计数不超过 255 时为单射
    """
    return np.asarray(lands, dtype=np.uint8).tobytes()


class MemoizedCastingModel:
    """
    施放概率缓存包装

    以 (卡名, 打包后的地牌分布) 为键，适用于计算代价较高的模型
    """

    def __init__(self, model: CastingProbabilityModel):
        self.model = model
        self._cache: Dict[Tuple[str, bytes], float] = {}
        self._lock = threading.Lock()

    def __call__(self, card: DraftCard, lands: np.ndarray) -> float:
        key = (card.name, pack_lands(lands))
        with self._lock:
            cached = self._cache.get(key)
        if cached is None:
            cached = self.model(card, lands)
            with self._lock:
                self._cache[key] = cached
        return cached

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class SourceCountCastingModel:
    """
    颜色来源模型

    对卡牌颜色标识中的每种颜色，计算到指定回合时至少抽到一张
    该颜色来源的超几何概率，各颜色概率相乘

    Attributes:
        deck_size: 套牌张数
        turn: 希望施放的回合
        on_the_play: 先手 (首回合不抽牌)
    """

    def __init__(self, deck_size: int = 40, turn: int = 3, on_the_play: bool = True):
        self.deck_size = deck_size
        self.turn = turn
        self.on_the_play = on_the_play

    @property
    def cards_seen(self) -> int:
        draws = self.turn - 1 if self.on_the_play else self.turn
        return min(self.deck_size, 7 + draws)

    def color_sources(self, lands: np.ndarray, color: str) -> int:
        """能产出某颜色的地牌数"""
        mask = COLOR_COMBINATION_INTERSECTS[:, MONO_COLOR_INDICES[color]]
        return int(np.asarray(lands)[mask].sum())

    def hit_probability(self, sources: int) -> float:
        """至少抽到一张来源的概率"""
        sources = min(sources, self.deck_size)
        n = self.cards_seen
        miss = comb(self.deck_size - sources, n) / comb(self.deck_size, n)
        return 1.0 - miss

    def __call__(self, card: DraftCard, lands: np.ndarray) -> float:
        if card.is_land:
            return 1.0
        probability = 1.0
        for color in normalize_colors(card.color_identity):
            probability *= self.hit_probability(self.color_sources(lands, color))
        return probability


def dampen(
    probabilities: np.ndarray,
    tiers: Sequence[Tuple[float, int]] = DEFAULT_DAMPENING,
) -> np.ndarray:
    """
    凸惩罚

    缺省分段: p < 0.2 取 5 次方，p < 0.33 取 3 次方，p < 0.5 取平方，其余不变

    Args:
        probabilities: 原始概率
        tiers: ((阈值, 指数), ...)，按阈值升序，取第一个满足的分段

    Returns:
        惩罚后的概率 (新数组)
    """
    p = np.asarray(probabilities, dtype=np.float64)
    if not tiers:
        return p.copy()
    conditions = [p < threshold for threshold, _ in tiers]
    choices = [p ** power for _, power in tiers]
    return np.select(conditions, choices, default=p)


def calculate_probabilities(
    cards: CardUniverse,
    groups: Iterable[Sequence[int]],
    lands: np.ndarray,
    model: CastingProbabilityModel = always_castable,
    tiers: Sequence[Tuple[float, int]] = DEFAULT_DAMPENING,
) -> np.ndarray:
    """
    计算整个卡池的施放概率向量

    只计算 groups 中出现的卡牌，其余保持 0

    Args:
        cards: 卡池
        groups: 下标列表的集合 (如 seen / picked / basics / 候选卡)
        lands: 地牌分布
        model: 施放概率模型
        tiers: 凸惩罚分段

    Returns:
        (n,) 概率向量
    """
    raw = np.zeros(len(cards), dtype=np.float64)
    computed = set()
    for group in groups:
        for ci in group:
            if ci in computed:
                continue
            computed.add(ci)
            raw[ci] = model(cards[ci], lands)
    np.clip(raw, 0.0, 1.0, out=raw)
    return dampen(raw, tiers)

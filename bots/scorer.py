"""
评分与选牌

把地牌搜索、施放概率和 oracle 集合组合成单一分数:
- evaluate_cards_or_pool: 评估候选卡牌 (或只评估卡池)
- calculate_bot_pick: 从当前包中选出最优卡牌
- calculate_bot_pick_from_options: 从若干卡牌组合中选出分数最低的组合
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np

from core.cards import CardUniverse
from core.colors import COLOR_COMBINATIONS, COLORS
from core.state import BotState, DrafterState
from .config import BotConfig, DEFAULT_CONFIG
from .lands import LandOptimizer, available_lands
from .oracles import ORACLES, Oracle
from .probability import CastingProbabilityModel, always_castable, calculate_probabilities
from .synergy import SynergyCache, sum_embeddings

logger = logging.getLogger(__name__)


@dataclass
class OracleResult:
    """单个 oracle 的评估结果"""
    title: str
    tooltip: str
    weight: float
    value: float

    @property
    def contribution(self) -> float:
        return self.weight * self.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "tooltip": self.tooltip,
            "weight": self.weight,
            "value": self.value,
        }


@dataclass
class BotScore:
    """
    评估结果

    Attributes:
        score: 总分
        oracle_results: 各 oracle 的权重与值 (用于解释)
        bot_state: 最终状态 (含地牌分布与概率)
        nonland_probability: 只评估卡池时的非地牌概率和，否则为 None
        colors: 地牌分布中数量足够的颜色
    """
    score: float
    oracle_results: List[OracleResult]
    bot_state: BotState = field(repr=False)
    nonland_probability: Optional[float] = None
    colors: List[str] = field(default_factory=list)

    @property
    def lands(self) -> np.ndarray:
        return self.bot_state.lands

    def lands_by_combination(self) -> Dict[str, int]:
        """非零地牌计数，键为颜色组合字符串 (无色为空串)"""
        return {
            "".join(COLOR_COMBINATIONS[i]): int(count)
            for i, count in enumerate(self.lands)
            if count > 0
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "oracles": [r.to_dict() for r in self.oracle_results],
            "colors": list(self.colors),
            "lands": self.lands_by_combination(),
            "nonland_probability": self.nonland_probability,
        }


def land_colors(lands: np.ndarray, min_sources: int = 2) -> List[str]:
    """
    地牌分布中来源数严格大于 min_sources 的颜色 (WUBRG 顺序)
    """
    counts = {color: 0 for color in COLORS}
    for i, count in enumerate(lands):
        for color in COLOR_COMBINATIONS[i]:
            counts[color] += int(count)
    return [color for color in COLORS if counts[color] > min_sources]


def _normalize_indices(card_indices: Union[None, int, Sequence[int]]) -> Tuple[int, ...]:
    if card_indices is None:
        return ()
    if isinstance(card_indices, (int, np.integer)):
        return (int(card_indices),)
    return tuple(int(ci) for ci in card_indices)


class Scorer:
    """
    选牌评分器

    协同缓存由评分器持有 (可注入共享实例)，其余计算均为输入的纯函数
    """

    def __init__(
        self,
        config: Optional[BotConfig] = None,
        synergy_cache: Optional[SynergyCache] = None,
        casting_model: CastingProbabilityModel = always_castable,
        oracles: Sequence[Oracle] = ORACLES,
    ):
        self.config = config or DEFAULT_CONFIG
        self.synergy_cache = synergy_cache if synergy_cache is not None else SynergyCache()
        self.casting_model = casting_model
        self.oracles = tuple(oracles)
        self.optimizer = LandOptimizer(self.config)

    def synergy(self, index1: int, index2: int, cards: CardUniverse) -> float:
        """两张卡牌的协同值 (经缓存)"""
        return self.synergy_cache.get_synergy(index1, index2, cards)

    def build_state(self, state: BotState, lands: np.ndarray) -> BotState:
        """
        以新地牌分布重新计算概率与卡池嵌入

        只计算 seen / picked / basics 中卡牌的概率，其余 (包括不在 seen 中的候选卡牌) 为 0

        Args:
            state: 当前状态
            lands: 新地牌分布

        Returns:
            新状态
        """
        probabilities = calculate_probabilities(
            state.cards,
            (state.seen, state.picked, state.basics),
            lands,
            self.casting_model,
            self.config.dampening,
        )
        pool_embedding = sum_embeddings(state.cards, state.picked, probabilities)
        return state.with_lands(lands, probabilities, pool_embedding)

    def calculate_score(self, state: BotState) -> BotScore:
        """
        计算总分

        只评估卡池时 (无候选卡牌)，总分乘以已选非地有色卡牌中
        最小的 nonland_slots 个概率之和
        """
        oracle_results = [
            OracleResult(
                title=oracle.title,
                tooltip=oracle.tooltip,
                weight=oracle.compute_weight(state.drafter),
                value=oracle.compute_value(state),
            )
            for oracle in self.oracles
        ]
        score = sum(r.contribution for r in oracle_results)

        if state.card_indices:
            return BotScore(score=score, oracle_results=oracle_results, bot_state=state)

        cards = state.cards
        nonland = sorted(
            float(state.probabilities[ci])
            for ci in state.picked
            if not cards.is_land[ci] and cards.is_colored[ci]
        )
        nonland_probability = sum(nonland[:self.config.nonland_slots])
        return BotScore(
            score=score * nonland_probability,
            oracle_results=oracle_results,
            bot_state=state,
            nonland_probability=nonland_probability,
        )

    def evaluate_cards_or_pool(
        self,
        card_indices: Union[None, int, Sequence[int]],
        drafter_state: DrafterState,
    ) -> BotScore:
        """
        评估候选卡牌 (或只评估卡池)

        Args:
            card_indices: 候选卡牌下标，单个下标、下标列表或 None
            drafter_state: 轮抽快照

        Returns:
            评估结果 (含地牌分布与颜色)
        """
        card_indices = _normalize_indices(card_indices)
        cards = drafter_state.cards
        available = available_lands(
            cards,
            drafter_state.picked + card_indices,
            drafter_state.basics,
            self.config.basic_copies,
        )
        initial = BotState.initial(drafter_state, card_indices, available)

        def score_lands(lands: np.ndarray) -> BotScore:
            return self.calculate_score(self.build_state(initial, lands))

        best = self.optimizer.optimize(
            available, drafter_state.pick_num, card_indices, score_lands
        )
        best.colors = land_colors(best.lands, self.config.min_color_sources)
        logger.debug(
            f"Evaluated {cards.names(card_indices) or 'pool'}: "
            f"score {best.score:.4f}, colors {''.join(best.colors) or '-'}"
        )
        return best

    def score_pack(
        self,
        drafter_state: DrafterState,
        reverse: bool = False,
    ) -> List[Tuple[int, BotScore]]:
        """
        对当前包内卡牌逐一评估并排序

        Args:
            drafter_state: 轮抽快照
            reverse: True 时按分数升序

        Returns:
            [(卡牌下标, 评估结果), ...]，同分保持包内顺序
        """
        scored = [
            (ci, self.evaluate_cards_or_pool(ci, drafter_state))
            for ci in drafter_state.cards_in_pack
            if ci is not None
        ]
        return sorted(scored, key=lambda item: item[1].score, reverse=not reverse)

    def rank_pack(
        self,
        drafter_state: DrafterState,
        reverse: bool = False,
    ) -> List[Tuple[int, float]]:
        """score_pack 的分数视图: [(卡牌下标, 分数), ...]"""
        return [(ci, result.score) for ci, result in self.score_pack(drafter_state, reverse)]

    def calculate_bot_pick(self, drafter_state: DrafterState, reverse: bool = False) -> int:
        """
        选出当前包中分数最高的卡牌

        Args:
            drafter_state: 轮抽快照
            reverse: True 时选分数最低的卡牌 (如故意弱选)

        Returns:
            卡牌下标

        Raises:
            ValueError: 当前包为空
        """
        ranking = self.score_pack(drafter_state, reverse)
        if not ranking:
            raise ValueError("No cards in pack")
        return ranking[0][0]

    def score_options(
        self,
        options: Sequence[Sequence[int]],
        drafter_state: DrafterState,
    ) -> List[Tuple[List[Tuple[int, int]], BotScore]]:
        """
        评估若干组合，按分数升序排列

        每个组合是包内位置列表，映射为卡牌下标后整体评估；空位与越界位置跳过，
        映射后为空的组合丢弃

        Args:
            options: 组合列表，每个组合为包内位置列表
            drafter_state: 轮抽快照

        Returns:
            [([(卡牌下标, 包内位置), ...], 评估结果), ...]，同分保持输入顺序
        """
        pack = drafter_state.cards_in_pack
        scored = []
        for positions in options:
            bundle = [
                (pack[pi], pi)
                for pi in positions
                if 0 <= pi < len(pack) and pack[pi] is not None
            ]
            if bundle:
                result = self.evaluate_cards_or_pool([ci for ci, _ in bundle], drafter_state)
                scored.append((bundle, result))
        return sorted(scored, key=lambda item: item[1].score)

    def calculate_bot_pick_from_options(
        self,
        options: Sequence[Sequence[int]],
        drafter_state: DrafterState,
    ) -> List[Tuple[int, int]]:
        """
        从若干组合中选出分数最低的组合

        注意排序方向与 calculate_bot_pick 相反

        Args:
            options: 组合列表，每个组合为包内位置列表
            drafter_state: 轮抽快照

        Returns:
            [(卡牌下标, 包内位置), ...]

        Raises:
            ValueError: 没有非空组合
        """
        scored = self.score_options(options, drafter_state)
        if not scored:
            raise ValueError("No non-empty options")
        return scored[0][0]

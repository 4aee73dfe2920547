"""
轮抽智能体

对外提供统一的 pick(state) 接口，供轮抽状态机调用
"""
from typing import List, Optional, Sequence, Tuple

import numpy as np

from core.state import DrafterState
from .scorer import Scorer


class DraftAgent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def pick(self, state: DrafterState) -> int:
        """从当前包中选择一张卡牌，返回卡牌下标"""
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass


class RandomDrafter(DraftAgent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def pick(self, state: DrafterState) -> int:
        options = [ci for ci in state.cards_in_pack if ci is not None]
        if not options:
            raise ValueError("No cards in pack")
        return options[int(self.rng.integers(len(options)))]

    def reset(self):
        self.rng = np.random.default_rng(self.seed)


class HeuristicDrafter(DraftAgent):
    """
    启发式智能体

    Args:
        scorer: 评分器，None 时新建
        reverse: True 时选分数最低的卡牌
    """

    def __init__(
        self,
        scorer: Optional[Scorer] = None,
        reverse: bool = False,
        name: str = "heuristic",
    ):
        super().__init__(name)
        self.scorer = scorer or Scorer()
        self.reverse = reverse

    def pick(self, state: DrafterState) -> int:
        return self.scorer.calculate_bot_pick(state, reverse=self.reverse)

    def pick_bundle(
        self,
        options: Sequence[Sequence[int]],
        state: DrafterState,
    ) -> List[Tuple[int, int]]:
        """从若干组合中选择 (分数最低的组合)"""
        return self.scorer.calculate_bot_pick_from_options(options, state)

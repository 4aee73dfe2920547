"""
轮抽状态定义

使用不可变数据结构:
- DrafterState: 一次评估的输入快照 (已见/已选/基本地/当前包)
- BotState: 搜索过程中的派生状态，每一步由上一步加地牌变化量生成新实例
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .cards import CardUniverse
from .colors import NUM_COMBINATIONS


def _as_indices(values: Optional[Sequence[int]]) -> Tuple[int, ...]:
    return tuple(int(v) for v in values) if values is not None else ()


def _frozen_array(values, dtype) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class DrafterState:
    """
    不可变轮抽快照

    Attributes:
        cards: 卡池
        seen: 已见过的卡牌下标 (含未选走的)
        picked: 已选卡牌下标
        basics: 虚拟基本地下标 (每张按 17 张计入可用地)
        pack_num: 当前包序号 (从 0 开始)
        pick_num: 包内选牌序号 (从 0 开始)
        num_packs: 包总数
        pack_size: 每包张数
        cards_in_pack: 当前包内卡牌下标，None 表示空位
    """
    cards: CardUniverse = field(repr=False)
    seen: Tuple[int, ...] = ()
    picked: Tuple[int, ...] = ()
    basics: Tuple[int, ...] = ()
    pack_num: int = 0
    pick_num: int = 0
    num_packs: int = 3
    pack_size: int = 15
    cards_in_pack: Tuple[Optional[int], ...] = ()

    def __post_init__(self):
        # frozen 数据类需通过 object.__setattr__ 规范化字段
        object.__setattr__(self, "seen", _as_indices(self.seen))
        object.__setattr__(self, "picked", _as_indices(self.picked))
        object.__setattr__(self, "basics", _as_indices(self.basics))
        object.__setattr__(
            self,
            "cards_in_pack",
            tuple(None if ci is None else int(ci) for ci in self.cards_in_pack),
        )

        n = len(self.cards)
        for ci in self.seen + self.picked + self.basics:
            assert 0 <= ci < n, f"Card index {ci} out of range [0, {n})"
        for ci in self.cards_in_pack:
            assert ci is None or 0 <= ci < n, f"Card index {ci} out of range [0, {n})"
        assert self.pack_num >= 0 and self.pick_num >= 0, "Negative pack/pick number"
        assert self.num_packs > 0 and self.pack_size > 0, "Empty draft format"

    @classmethod
    def from_dict(cls, d: Dict[str, Any], cards: CardUniverse) -> 'DrafterState':
        """
        从字典创建快照

        兼容 snake_case 与 camelCase 字段名
        """
        def get(snake: str, camel: str, default):
            if snake in d:
                return d[snake]
            return d.get(camel, default)

        return cls(
            cards=cards,
            seen=d.get("seen", ()),
            picked=d.get("picked", ()),
            basics=d.get("basics", ()),
            pack_num=int(get("pack_num", "packNum", 0)),
            pick_num=int(get("pick_num", "pickNum", 0)),
            num_packs=int(get("num_packs", "numPacks", 3)),
            pack_size=int(get("pack_size", "packSize", 15)),
            cards_in_pack=get("cards_in_pack", "cardsInPack", ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seen": list(self.seen),
            "picked": list(self.picked),
            "basics": list(self.basics),
            "pack_num": self.pack_num,
            "pick_num": self.pick_num,
            "num_packs": self.num_packs,
            "pack_size": self.pack_size,
            "cards_in_pack": list(self.cards_in_pack),
        }

    def with_pick(self, card_index: int) -> 'DrafterState':
        """
        选牌后的新快照 (seen 由调用方维护，通常已含当前包)

        Args:
            card_index: 选走的卡牌下标

        Returns:
            新状态，cards_in_pack 清空，pick_num 加一
        """
        if card_index not in self.cards_in_pack:
            raise ValueError(f"Card {card_index} is not in the current pack")
        return replace(
            self,
            picked=self.picked + (card_index,),
            cards_in_pack=(),
            pick_num=self.pick_num + 1,
        )


@dataclass(frozen=True, eq=False)
class BotState:
    """
    评估过程中的派生状态

    不在原地修改，地牌分布每变化一次就生成一个新实例

    Attributes:
        drafter: 输入快照
        card_indices: 正在评估的候选卡牌下标 (为空表示只评估卡池)
        available_lands: (32,) 各颜色组合的可用地数量
        lands: (32,) 当前地牌分布，总数不超过 17
        probabilities: (n,) 每张卡牌的施放概率
        total_probability: 概率之和
        pool_embedding: 已选卡牌按概率加权的嵌入和
    """
    drafter: DrafterState
    card_indices: Tuple[int, ...]
    available_lands: np.ndarray
    lands: np.ndarray
    probabilities: np.ndarray
    total_probability: float
    pool_embedding: np.ndarray

    @classmethod
    def initial(
        cls,
        drafter: DrafterState,
        card_indices: Sequence[int],
        available_lands: np.ndarray,
    ) -> 'BotState':
        """创建尚未计算概率的初始状态 (地牌分布为空)"""
        n = len(drafter.cards)
        return cls(
            drafter=drafter,
            card_indices=_as_indices(card_indices),
            available_lands=_frozen_array(available_lands, np.int64),
            lands=_frozen_array(np.zeros(NUM_COMBINATIONS), np.int64),
            probabilities=_frozen_array(np.zeros(n), np.float64),
            total_probability=0.0,
            pool_embedding=_frozen_array(np.zeros(drafter.cards.embeddings.shape[1]), np.float64),
        )

    def with_lands(
        self,
        lands: np.ndarray,
        probabilities: np.ndarray,
        pool_embedding: np.ndarray,
    ) -> 'BotState':
        """
        以新的地牌分布派生新状态

        Args:
            lands: 新地牌分布
            probabilities: 对应的施放概率
            pool_embedding: 对应的卡池嵌入

        Returns:
            新状态
        """
        return replace(
            self,
            lands=_frozen_array(lands, np.int64),
            probabilities=_frozen_array(probabilities, np.float64),
            total_probability=float(np.sum(probabilities)),
            pool_embedding=_frozen_array(pool_embedding, np.float64),
        )

    @property
    def cards(self) -> CardUniverse:
        return self.drafter.cards

    @property
    def seen(self) -> Tuple[int, ...]:
        return self.drafter.seen

    @property
    def picked(self) -> Tuple[int, ...]:
        return self.drafter.picked

    @property
    def basics(self) -> Tuple[int, ...]:
        return self.drafter.basics

    @property
    def total_lands(self) -> int:
        return int(self.lands.sum())

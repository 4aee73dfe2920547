"""
卡牌定义与卡池 (Card Universe)

卡牌元数据由外部卡牌库提供，这里只做只读封装:
- 名称 (作为协同缓存的键，在卡池内唯一)
- 颜色标识、类型行
- Elo 评分 (缺省 1200)
- 协同嵌入向量 (缺省全零)

其余结构一律通过整数下标引用卡池中的卡牌
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .colors import land_combination, normalize_colors


# 协同嵌入维度
EMBEDDING_DIM = 64

# 缺省 Elo
DEFAULT_ELO = 1200.0


def elo_to_value(elo: Optional[float]) -> float:
    """
    Elo -> 评分值

    1200 对应 1.0，每 800 分相差 10 倍
    """
    if elo is None:
        elo = DEFAULT_ELO
    return 10.0 ** ((elo - DEFAULT_ELO) / 800.0)


@dataclass(frozen=True)
class DraftCard:
    """
    不可变卡牌表示

    Attributes:
        name: 卡牌名称
        color_identity: 颜色标识 (WUBRG 子集，无色为空)
        type_line: 类型行，如 "Basic Land Forest"
        elo: Elo 评分，None 表示未知
        embedding: 协同嵌入向量，None 表示缺失
    """
    name: str
    color_identity: Tuple[str, ...] = ()
    type_line: str = ""
    elo: Optional[float] = None
    embedding: Optional[Tuple[float, ...]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'DraftCard':
        """
        从字典创建卡牌

        兼容 snake_case 与 camelCase 字段名 (color_identity / colorIdentity,
        type_line / type)
        """
        identity = d.get("color_identity", d.get("colorIdentity")) or ()
        embedding = d.get("embedding")
        return cls(
            name=d["name"],
            color_identity=normalize_colors(identity),
            type_line=d.get("type_line", d.get("type")) or "",
            elo=d.get("elo"),
            embedding=tuple(float(x) for x in embedding) if embedding is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "color_identity": list(self.color_identity),
            "type_line": self.type_line,
            "elo": self.elo,
            "embedding": list(self.embedding) if self.embedding is not None else None,
        }

    @property
    def is_land(self) -> bool:
        return "land" in self.type_line.lower()

    @property
    def is_colored(self) -> bool:
        return len(normalize_colors(self.color_identity)) > 0

    @property
    def value(self) -> float:
        """Elo 对应的评分值"""
        return elo_to_value(self.elo)

    def embedding_array(self) -> np.ndarray:
        """嵌入向量 (缺失时为零向量)"""
        if self.embedding is None:
            return np.zeros(EMBEDDING_DIM, dtype=np.float64)
        arr = np.zeros(EMBEDDING_DIM, dtype=np.float64)
        values = np.asarray(self.embedding, dtype=np.float64)[:EMBEDDING_DIM]
        arr[:len(values)] = values
        return arr


class CardUniverse:
    """
    有序卡池

    预先计算向量化数据，供概率、评分与协同计算使用:
        values: (n,) Elo 评分值
        embeddings: (n, EMBEDDING_DIM) 嵌入矩阵
        is_land / is_colored: (n,) 布尔掩码
        land_combinations: (n,) 地牌产出的组合编号，非地牌为 -1
    """

    def __init__(self, cards: Iterable[DraftCard]):
        self.cards: Tuple[DraftCard, ...] = tuple(cards)

        n = len(self.cards)
        self.values = np.array([c.value for c in self.cards], dtype=np.float64)
        self.embeddings = (
            np.stack([c.embedding_array() for c in self.cards])
            if n > 0
            else np.zeros((0, EMBEDDING_DIM), dtype=np.float64)
        )
        self.is_land = np.array([c.is_land for c in self.cards], dtype=bool)
        self.is_colored = np.array([c.is_colored for c in self.cards], dtype=bool)
        self.land_combinations = np.array(
            [land_combination(c) if c.is_land else -1 for c in self.cards], dtype=np.int64
        )

        for arr in (self.values, self.embeddings, self.is_land, self.is_colored, self.land_combinations):
            arr.setflags(write=False)

    @classmethod
    def from_dicts(cls, records: Iterable[Dict[str, Any]]) -> 'CardUniverse':
        """从字典列表创建卡池"""
        return cls(DraftCard.from_dict(r) for r in records)

    def __len__(self) -> int:
        return len(self.cards)

    def __getitem__(self, index: int) -> DraftCard:
        return self.cards[index]

    def __iter__(self):
        return iter(self.cards)

    def names(self, indices: Sequence[int]) -> List[str]:
        """下标列表 -> 名称列表"""
        return [self.cards[i].name for i in indices]

    def index_of(self, name: str) -> int:
        """
        按名称查找下标

        Raises:
            KeyError: 名称不存在
        """
        for i, card in enumerate(self.cards):
            if card.name == name:
                return i
        raise KeyError(name)

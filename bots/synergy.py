"""
卡牌协同模型

- 两两协同: 两张卡嵌入向量的点积乘以 MAX_SCORE，按无序名称对缓存
- 卡池协同: 先按权重合成卡池嵌入，再与目标嵌入做点积，避免 O(n^2) 两两计算
"""
import threading
from typing import Dict, Sequence, Tuple

import numpy as np

from core.cards import CardUniverse
from .config import MAX_SCORE


def dot_product(embedding1: np.ndarray, embedding2: np.ndarray) -> float:
    """两个嵌入向量的点积"""
    return float(np.dot(embedding1, embedding2))


def sum_embeddings(
    cards: CardUniverse,
    indices: Sequence[int],
    weights: np.ndarray,
) -> np.ndarray:
    """
    按权重求和嵌入向量

    Args:
        cards: 卡池
        indices: 参与求和的卡牌下标 (可重复，重复即重复计入)
        weights: (n,) 每张卡牌的权重，通常为施放概率

    Returns:
        (EMBEDDING_DIM,) 加权和
    """
    if len(indices) == 0:
        return np.zeros(cards.embeddings.shape[1], dtype=np.float64)
    idx = np.asarray(indices, dtype=np.int64)
    return weights[idx] @ cards.embeddings[idx]


def pool_synergy(
    cards: CardUniverse,
    picked: Sequence[int],
    weights: np.ndarray,
    other: np.ndarray,
) -> float:
    """卡池加权嵌入与另一嵌入的点积 (两两协同的线性扩展)"""
    return dot_product(sum_embeddings(cards, picked, weights), other)


class SynergyCache:
    """
    两两协同缓存

    以无序卡牌名称对为键，值只取决于两张卡的嵌入，因此缓存不会改变计算结果。
    读写均在锁内完成，可在多线程评估间共享。
    """

    def __init__(self):
        self._cache: Dict[Tuple[str, str], float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(name1: str, name2: str) -> Tuple[str, str]:
        return (name1, name2) if name1 <= name2 else (name2, name1)

    def get_synergy(self, index1: int, index2: int, cards: CardUniverse) -> float:
        """
        获取两张卡的协同值，缺失时计算并写入缓存

        Args:
            index1: 卡牌 1 下标
            index2: 卡牌 2 下标
            cards: 卡池

        Returns:
            协同值，范围 [-MAX_SCORE, MAX_SCORE] (单位嵌入时)
        """
        key = self._key(cards[index1].name, cards[index2].name)
        with self._lock:
            synergy = self._cache.get(key)
        if synergy is None:
            synergy = MAX_SCORE * dot_product(cards.embeddings[index1], cards.embeddings[index2])
            with self._lock:
                synergy = self._cache.setdefault(key, synergy)
        return synergy

    def clear(self):
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, names: Tuple[str, str]) -> bool:
        with self._lock:
            return self._key(*names) in self._cache

"""
颜色组合代数

轮抽使用 5 种颜色 (W/U/B/R/G):
- 所有颜色子集 (含空集) 共 32 种组合，编号 0..31
- 预计算组合间的包含 (includes) 与相交 (intersects) 关系
"""
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, Sequence, Tuple

import numpy as np


# 颜色顺序 (WUBRG)
COLORS: Tuple[str, ...] = ('W', 'U', 'B', 'R', 'G')

# 基本地名称
BASICS: Tuple[str, ...] = ('Plains', 'Island', 'Swamp', 'Mountain', 'Forest')

# 颜色到基本地类型的映射
BASICS_MAP: Dict[str, str] = dict(zip(COLORS, BASICS))

# 检索地 -> 可检索的颜色
FETCH_LANDS: Dict[str, Tuple[str, ...]] = {
    'Arid Mesa': ('W', 'R'),
    'Bloodstained Mire': ('B', 'R'),
    'Flooded Strand': ('W', 'U'),
    'Marsh Flats': ('W', 'B'),
    'Misty Rainforest': ('U', 'G'),
    'Polluted Delta': ('U', 'B'),
    'Scalding Tarn': ('U', 'R'),
    'Verdant Catacombs': ('B', 'G'),
    'Windswept Heath': ('W', 'G'),
    'Wooded Foothills': ('R', 'G'),
    'Prismatic Vista': COLORS,
    'Fabled Passage': COLORS,
    'Terramorphic Expanse': COLORS,
    'Evolving Wilds': COLORS,
}

NUM_COMBINATIONS = 2 ** len(COLORS)

# 全部颜色组合: 先按大小，再按 WUBRG 顺序，空集编号为 0
COLOR_COMBINATIONS: Tuple[Tuple[str, ...], ...] = tuple(
    comb
    for size in range(len(COLORS) + 1)
    for comb in combinations(COLORS, size)
)

_COMBINATION_INDICES: Dict[FrozenSet[str], int] = {
    frozenset(comb): i for i, comb in enumerate(COLOR_COMBINATIONS)
}


def _build_relation(predicate) -> np.ndarray:
    relation = np.zeros((NUM_COMBINATIONS, NUM_COMBINATIONS), dtype=bool)
    for i, comb1 in enumerate(COLOR_COMBINATIONS):
        for j, comb2 in enumerate(COLOR_COMBINATIONS):
            relation[i, j] = predicate(set(comb1), set(comb2))
    relation.setflags(write=False)
    return relation


# COLOR_COMBINATION_INCLUDES[i, j]: 组合 j 的颜色是组合 i 的子集
COLOR_COMBINATION_INCLUDES: np.ndarray = _build_relation(lambda a, b: b <= a)

# COLOR_COMBINATION_INTERSECTS[i, j]: 两个组合至少共享一种颜色
COLOR_COMBINATION_INTERSECTS: np.ndarray = _build_relation(lambda a, b: bool(a & b))

# 单色组合编号
MONO_COLOR_INDICES: Dict[str, int] = {
    color: _COMBINATION_INDICES[frozenset((color,))] for color in COLORS
}


def normalize_colors(colors: Iterable[str]) -> Tuple[str, ...]:
    """
    过滤非 WUBRG 符号 (如无色 'C') 并按 WUBRG 排序

    Args:
        colors: 颜色符号序列，大小写均可

    Returns:
        规范化后的颜色元组
    """
    present = {c.upper() for c in colors}
    return tuple(c for c in COLORS if c in present)


def combination_index(colors: Iterable[str]) -> int:
    """
    颜色组合 -> 编号 (0..31)

    Args:
        colors: 颜色符号序列，顺序与重复无关

    Returns:
        组合编号

    Raises:
        ValueError: 含有非颜色符号
    """
    key = frozenset(c.upper() for c in colors)
    if key not in _COMBINATION_INDICES:
        raise ValueError(f"Unknown color combination: {sorted(key)}")
    return _COMBINATION_INDICES[key]


def combination_colors(index: int) -> Tuple[str, ...]:
    """编号 -> 颜色组合"""
    return COLOR_COMBINATIONS[index]


def includes(i: int, j: int) -> bool:
    """组合 i 是否包含组合 j 的全部颜色"""
    return bool(COLOR_COMBINATION_INCLUDES[i, j])


def intersects(i: int, j: int) -> bool:
    """组合 i 与组合 j 是否至少共享一种颜色"""
    return bool(COLOR_COMBINATION_INTERSECTS[i, j])


def consider_in_combination(combination: Sequence[str], card) -> bool:
    """
    卡牌的颜色标识是否落在给定颜色组合内

    Args:
        combination: 颜色组合
        card: 卡牌 (None 视为不可考虑)
    """
    if card is None:
        return False
    return includes(
        combination_index(combination),
        combination_index(normalize_colors(card.color_identity)),
    )


def is_playable_land(colors: Sequence[str], card) -> bool:
    """
    地牌在给定颜色下是否可用

    满足任一条件即可用:
    1. 颜色标识落在组合内
    2. 与组合至少共享两种颜色
    3. 是能检索组合内任一颜色的检索地
    4. 类型行包含组合内任一颜色的基本地类型 (如 "Forest Island")
    """
    identity = normalize_colors(card.color_identity)
    if consider_in_combination(colors, card):
        return True
    if sum(1 for c in colors if c in identity) > 1:
        return True
    fetchable = FETCH_LANDS.get(card.name)
    if fetchable and any(c in colors for c in fetchable):
        return True
    type_line = card.type_line.lower()
    return any(BASICS_MAP[c.upper()].lower() in type_line for c in colors)


def land_combination(card) -> int:
    """
    地牌产出的颜色组合编号

    检索地按其可检索的全部颜色计入一个组合，其余按颜色标识计入
    """
    colors = FETCH_LANDS.get(card.name, card.color_identity)
    return combination_index(normalize_colors(colors))


"""
tests/conftest.py
共享测试夹具: 小型卡池与轮抽快照工厂
"""
import numpy as np
import pytest

from core.cards import EMBEDDING_DIM, CardUniverse, DraftCard
from core.state import DrafterState


def unit_embedding(*axes: int) -> tuple:
    """在给定轴上取值并归一化的嵌入"""
    v = np.zeros(EMBEDDING_DIM)
    for axis in axes:
        v[axis] = 1.0
    return tuple(v / np.linalg.norm(v))


# (名称, 颜色标识, 类型行, Elo, 嵌入)
CARD_SPECS = [
    ("Plains", ("W",), "Basic Land Plains", None, None),
    ("Island", ("U",), "Basic Land Island", None, None),
    ("Swamp", ("B",), "Basic Land Swamp", None, None),
    ("Mountain", ("R",), "Basic Land Mountain", None, None),
    ("Forest", ("G",), "Basic Land Forest", None, None),
    ("White Knight", ("W",), "Creature Human Knight", 1400, unit_embedding(0)),
    ("Twin Knight", ("W",), "Creature Human Knight", 1400, unit_embedding(0)),
    ("Blue Sage", ("U",), "Creature Human Wizard", 1300, unit_embedding(1)),
    ("Red Bolt", ("R",), "Instant", 1500, unit_embedding(2)),
    ("Green Bear", ("G",), "Creature Bear", 1200, unit_embedding(3)),
    ("Black Fiend", ("B",), "Creature Demon", 1250, unit_embedding(4)),
    ("Azorius Guildmage", ("W", "U"), "Creature Human Wizard", 1350, unit_embedding(0, 1)),
    ("Mind Stone", (), "Artifact", 1100, None),
    ("Hallowed Fountain", ("W", "U"), "Land Plains Island", 1250, None),
    ("Flooded Strand", (), "Land", 1300, None),
    ("Wastes", (), "Basic Land", None, None),
]


@pytest.fixture(name="cards", scope="session")
def fixture_cards():
    return CardUniverse(
        DraftCard(name=name, color_identity=colors, type_line=type_line, elo=elo, embedding=embedding)
        for name, colors, type_line, elo, embedding in CARD_SPECS
    )


@pytest.fixture(name="idx", scope="session")
def fixture_idx(cards):
    return {card.name: i for i, card in enumerate(cards)}


@pytest.fixture(name="make_state")
def fixture_make_state(cards):
    def _make(**kwargs) -> DrafterState:
        return DrafterState(cards=cards, **kwargs)

    return _make


@pytest.fixture(name="pack_state")
def fixture_pack_state(cards):
    """当前包内卡牌同时计入已见"""
    def _make(pack, seen=(), **kwargs) -> DrafterState:
        seen = tuple(seen) + tuple(ci for ci in pack if ci is not None)
        return DrafterState(cards=cards, seen=seen, cards_in_pack=pack, **kwargs)

    return _make

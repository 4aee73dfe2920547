"""
Bots Layer - 选牌评分

Modules:
    config: 机器人配置
    synergy: 卡牌协同模型
    probability: 施放概率模型
    lands: 地牌分布搜索
    oracles: 启发式集合
    scorer: 评分与选牌
    agent: 轮抽智能体
"""
from .config import (
    MAX_SCORE,
    BotConfig,
    DEFAULT_CONFIG,
    SINGLE_START_CONFIG,
)
from .synergy import (
    SynergyCache,
    dot_product,
    sum_embeddings,
    pool_synergy,
)
from .probability import (
    CastingProbabilityModel,
    always_castable,
    pack_lands,
    MemoizedCastingModel,
    SourceCountCastingModel,
    dampen,
    calculate_probabilities,
)
from .lands import (
    LandOptimizer,
    available_lands,
    random_lands,
    find_transitions,
    derive_seed,
)
from .oracles import (
    Oracle,
    ORACLES,
    ORACLES_BY_NAME,
    interpolate_weight,
    calculate_weight,
)
from .scorer import (
    OracleResult,
    BotScore,
    Scorer,
    land_colors,
)
from .agent import (
    DraftAgent,
    RandomDrafter,
    HeuristicDrafter,
)

__all__ = [
    # config
    "MAX_SCORE",
    "BotConfig",
    "DEFAULT_CONFIG",
    "SINGLE_START_CONFIG",
    # synergy
    "SynergyCache",
    "dot_product",
    "sum_embeddings",
    "pool_synergy",
    # probability
    "CastingProbabilityModel",
    "always_castable",
    "pack_lands",
    "MemoizedCastingModel",
    "SourceCountCastingModel",
    "dampen",
    "calculate_probabilities",
    # lands
    "LandOptimizer",
    "available_lands",
    "random_lands",
    "find_transitions",
    "derive_seed",
    # oracles
    "Oracle",
    "ORACLES",
    "ORACLES_BY_NAME",
    "interpolate_weight",
    "calculate_weight",
    # scorer
    "OracleResult",
    "BotScore",
    "Scorer",
    "land_colors",
    # agent
    "DraftAgent",
    "RandomDrafter",
    "HeuristicDrafter",
]

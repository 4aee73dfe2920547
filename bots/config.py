"""
选牌机器人配置

定义评分与地牌搜索相关的常量和可调参数
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


# 每个 oracle 可达到的最大值
MAX_SCORE = 10.0


@dataclass(frozen=True)
class BotConfig:
    """
    机器人配置

    Attributes:
        max_lands: 地牌分布总数上限
        basic_copies: 每张虚拟基本地计入的张数
        num_restarts: 地牌搜索的重启次数 (不同种子)
        restart_seed_stride: 相邻两次重启的种子间隔
        base_seed: 种子偏移
        nonland_slots: 只评估卡池时计入的非地牌数量 (40 张套牌约 23 张非地牌)
        min_color_sources: 报告颜色时要求地牌数严格大于该值
        dampening: 概率惩罚分段 ((阈值, 指数), ...)，按阈值升序
        max_search_steps: 每次搜索接受改进的步数上限，None 表示不限
    """
    # 地牌
    max_lands: int = 17
    basic_copies: int = 17

    # 多起点搜索
    num_restarts: int = 2
    restart_seed_stride: int = 5
    base_seed: int = 0
    max_search_steps: Optional[int] = None

    # 评分
    nonland_slots: int = 23
    min_color_sources: int = 2
    dampening: Tuple[Tuple[float, int], ...] = ((0.2, 5), (0.33, 3), (0.5, 2))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'BotConfig':
        """从字典创建配置 (忽略未知字段)"""
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "dampening" in filtered:
            filtered["dampening"] = tuple(
                (float(threshold), int(power)) for threshold, power in filtered["dampening"]
            )
        return cls(**filtered)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "max_lands": self.max_lands,
            "basic_copies": self.basic_copies,
            "num_restarts": self.num_restarts,
            "restart_seed_stride": self.restart_seed_stride,
            "base_seed": self.base_seed,
            "max_search_steps": self.max_search_steps,
            "nonland_slots": self.nonland_slots,
            "min_color_sources": self.min_color_sources,
            "dampening": [list(tier) for tier in self.dampening],
        }


# 预定义配置
DEFAULT_CONFIG = BotConfig()

# 单起点搜索，用于调试和快速评估
SINGLE_START_CONFIG = BotConfig(num_restarts=1)

#!/usr/bin/env python3
"""
选牌脚本

Usage:
    python scripts/pick.py --cards cards.json --state state.json
    python scripts/pick.py --cards cards.json --state state.json --reverse
    python scripts/pick.py --cards cards.json --state state.json --options options.json
    python scripts/pick.py --cards cards.json --state state.json --pool --output result.json
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core import CardUniverse, DrafterState
from bots import BotConfig, BotScore, Scorer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Draft bot pick")

    # 输入
    parser.add_argument("--cards", type=str, required=True, help="Card universe JSON (list of cards)")
    parser.add_argument("--state", type=str, required=True, help="Drafter state JSON")
    parser.add_argument("--config", type=str, help="Bot config JSON")

    # 模式
    parser.add_argument("--options", type=str, help="Bundle options JSON (list of pack positions)")
    parser.add_argument("--pool", action="store_true", help="Evaluate the pool only")
    parser.add_argument("--reverse", action="store_true", help="Pick the lowest scoring card")

    # 其他
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def load_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def log_score(title: str, score: BotScore):
    """输出评分明细"""
    logger.info("=" * 50)
    logger.info(title)
    logger.info("=" * 50)
    for result in score.oracle_results:
        logger.info(
            f"{result.title:<18} weight {result.weight:6.2f}  value {result.value:8.4f}"
            f"  -> {result.contribution:8.4f}"
        )
    if score.nonland_probability is not None:
        logger.info(f"Nonland probability: {score.nonland_probability:.4f}")
    logger.info(f"Score: {score.score:.4f}")
    logger.info(f"Colors: {''.join(score.colors) or '-'}")
    logger.info(f"Lands: {score.lands_by_combination()}")
    logger.info("=" * 50)


def main():
    args = parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        cards = CardUniverse.from_dicts(load_json(args.cards))
        state = DrafterState.from_dict(load_json(args.state), cards)
        config = BotConfig.from_dict(load_json(args.config)) if args.config else BotConfig()
    except (OSError, KeyError, TypeError, ValueError, AssertionError) as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)

    scorer = Scorer(config=config)

    if args.pool:
        score = scorer.evaluate_cards_or_pool(None, state)
        log_score("Pool Evaluation", score)
        output = score.to_dict()
    elif args.options:
        try:
            scored = scorer.score_options(load_json(args.options), state)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Invalid options: {e}")
            sys.exit(1)
        if not scored:
            logger.error("No non-empty options")
            sys.exit(1)
        bundle, score = scored[0]
        indices = [ci for ci, _ in bundle]
        logger.info(f"Chosen bundle: {cards.names(indices)} (positions {[pi for _, pi in bundle]})")
        log_score("Bundle Evaluation", score)
        output = {"bundle": [list(pair) for pair in bundle], **score.to_dict()}
    else:
        if not any(ci is not None for ci in state.cards_in_pack):
            logger.error("Drafter state has no cards in pack")
            sys.exit(1)
        ranking = scorer.score_pack(state, reverse=args.reverse)
        logger.info("Ranking:")
        for i, (ci, result) in enumerate(ranking):
            logger.info(f"  {i + 1}. {cards[ci].name}: {result.score:.4f}")
        pick, score = ranking[0]
        log_score(f"Pick: {cards[pick].name}", score)
        output = {
            "pick": pick,
            "ranking": [[ci, result.score] for ci, result in ranking],
            **score.to_dict(),
        }

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)
        logger.info(f"Results saved to {args.output}")


if __name__ == "__main__":
    main()

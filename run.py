#!/usr/bin/env python3
"""
Quick CLI runner for the Nexus Insights pipeline.

Usage:
    python run.py                    # Demo with offline fixtures
    python run.py --mode demo        # Demo pipeline run (analysis + battle card)
    python run.py --mode api         # Start FastAPI server
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.settings import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("run")


def print_progress(progress):
    print(f"  [{progress.progress:>3}%] {progress.step.value:<12} {progress.message}")


def print_analysis(result):
    m = result.metrics
    print(f"\n🎬 {result.video.title} ({result.video.channel_title})")
    print(f"   Comments:        {result.stats.total_fetched} fetched, "
          f"{result.stats.trash_count} filtered, {result.stats.total_analyzed} analyzed")
    print(f"   Pain Index:      {m.pain_index}/100")
    print(f"   Demand Velocity: {m.demand_velocity}/100")
    print(f"   Loyalty Depth:   {m.loyalty_depth}/100")
    print(f"   Confusion Score: {m.confusion_score}/100")
    for theme in m.themes[:5]:
        print(f"   • {theme.topic:<12} {theme.sentiment.value} "
              f"vol={theme.volume} intensity={theme.intensity}")
    print(f"\n   📝 {result.strategy.summary}")
    plan = result.strategy.action_plan
    for label, items in (
        ("Fix", plan.immediate_fixes),
        ("Content", plan.content_opportunities),
        ("Hook", plan.marketing_hooks),
    ):
        for item in items:
            print(f"   {label:>8}: {item}")


def demo():
    """Analyze two fixture videos offline and print the battle card."""
    from utils.demo import KeywordLLM, MY_VIDEO, THEIR_VIDEO, demo_source
    from utils.pipeline import compare_videos

    print("\n" + "="*70)
    print("  🔍 NEXUS INSIGHTS — DEMO RUN (offline fixtures)")
    print("="*70 + "\n")

    comparison = compare_videos(
        MY_VIDEO.video_id,
        THEIR_VIDEO.video_id,
        source=demo_source(),
        llm=KeywordLLM(),
        on_progress=print_progress,
        pause_seconds=0,
    )

    print_analysis(comparison.mine)
    print_analysis(comparison.theirs)

    gap = comparison.gap
    print("\n" + "─"*70)
    print("  ⚔️  BATTLE CARD")
    print("─"*70)
    for point in gap.winning_points:
        print(f"   ✅ {point.topic}: {point.insight}")
    for point in gap.losing_points:
        print(f"   ❌ {point.topic}: {point.insight}")
    for content_gap in gap.content_gaps:
        print(f"   ❓ {content_gap.question} ({content_gap.source}, x{content_gap.frequency})")
    for hook in gap.why_us_hooks:
        print(f"   💬 {hook}")
    snap = gap.comparison
    print(f"\n   Pain:   ours {snap.my_pain_index} vs theirs {snap.their_pain_index}")
    print(f"   Demand: ours {snap.my_demand_velocity} vs theirs {snap.their_demand_velocity}")

    print("\n" + "="*70)
    print(f"  🔌 Start API: uvicorn api.main:app --reload --port {settings.API_PORT}")
    print("="*70 + "\n")


def start_api():
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Nexus Insights: YouTube comment intelligence")
    parser.add_argument(
        "--mode",
        choices=["demo", "api"],
        default="demo",
        help="Run mode: demo | api",
    )
    args = parser.parse_args()

    if args.mode == "demo":
        demo()
    elif args.mode == "api":
        start_api()

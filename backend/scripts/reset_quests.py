"""
Reset every quest back to active with no progress.

Works against whichever backend MUSICQUEST_QUEST_BACKEND selects (the JSON
file under MUSICQUEST_DATA_DIR by default, or the Supabase quests table).

Usage:
    cd backend
    python scripts/reset_quests.py [--dry-run]
"""
import os
import sys

# Add backend root to path so the musicquest package imports without installing
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from musicquest.config import get_settings
from musicquest.db import make_quest_backend
from musicquest.engine.progress import quest_progress
from musicquest.store import QuestStore


def run(dry_run: bool = False) -> None:
    settings = get_settings()
    print(f"\n🎧 Quest backend: {settings.quest_backend}")

    store = QuestStore(make_quest_backend(settings))
    quests = store.snapshot()
    if not quests:
        print("  No quests found — nothing to reset.")
        return

    started = 0
    for quest in quests:
        if quest.state is None:
            print(f"    {quest.id}: missing state")
            continue
        progress = quest_progress(quest)
        if progress.done:
            started += 1
        print(f"    {quest.id}: {progress.status.value} {progress.done}/{progress.total}")

    print(f"\n  {started} of {len(quests)} quests have progress.")

    if dry_run:
        print("\n  DRY RUN — no changes written.")
        return

    count = store.reset()
    print(f"\n✅ Reset {count} quests.\n")


if __name__ == "__main__":
    run(dry_run="--dry-run" in sys.argv[1:])

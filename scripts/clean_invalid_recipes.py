import argparse
import logging
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.app.deps import get_supabase
from src.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("clean_invalid_recipes")


def main() -> int:
    parser = argparse.ArgumentParser(description="Delete stored recipes missing a title or an image")
    parser.add_argument(
        "--untitled-only",
        action="store_true",
        help="Only delete recipes without a title (same sweep as DELETE /recipes/clear-all-cache)",
    )
    args = parser.parse_args()

    store = SupabaseRecipeRepository(get_supabase())
    try:
        removed = store.delete_untitled() if args.untitled_only else store.delete_incomplete()
    except Exception:
        logger.exception("Error cleaning recipes")
        return 1

    logger.info("Deleted %d incomplete recipe(s)", removed)
    return 0


if __name__ == "__main__":
    sys.exit(main())

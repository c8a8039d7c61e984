import argparse
import asyncio
import logging
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.app.config import settings
from src.app.deps import get_supabase
from src.app.domain.models import SeedStatus
from src.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository
from src.services.mealdb_client import MealDbClient
from src.services.seeder import LETTERS, CatalogSeeder

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


async def run(letters: str, batch_size: int) -> SeedStatus:
    provider = MealDbClient(settings.MEALDB_BASE_URL, timeout=settings.UPSTREAM_TIMEOUT_SECONDS)
    seeder = CatalogSeeder(
        provider=provider,
        store=SupabaseRecipeRepository(get_supabase()),
        batch_size=batch_size,
        letters=tuple(letters),
    )
    try:
        result = await seeder.seed_all()
    finally:
        await provider.aclose()

    print("status:", result.status.value)
    print("letters fetched:", result.letters_fetched)
    print("letters failed:", result.letters_failed)
    print("recipes upserted:", result.recipes_upserted)
    return result.status


def main() -> None:
    parser = argparse.ArgumentParser(description="Populate the recipe store from the provider")
    parser.add_argument("--letters", default="".join(LETTERS))
    parser.add_argument("--batch-size", type=int, default=settings.SEED_BATCH_SIZE)
    args = parser.parse_args()

    status = asyncio.run(run(args.letters.lower(), args.batch_size))
    sys.exit(0 if status == SeedStatus.DONE else 1)


if __name__ == "__main__":
    main()

"""
Скрипт для загрузки демо работ мастеров в Qdrant.

Генерирует случайные нормализованные векторы для каждого фасета и
правдоподобные payload-данные (услуга, мастер, город, теги), чтобы API
поиска можно было проверить локально без модели эмбеддингов.
"""
import argparse
import asyncio
import random
from typing import Dict, List, Tuple

import numpy as np
from loguru import logger

from stylematch.config import settings
from stylematch.db.qdrant import QdrantManager


# Категории услуг и типичные теги
CATEGORY_TAGS = {
    "hair-color": ["balayage", "highlights", "ombre", "blonde", "brunette", "warm-tones", "long-hair"],
    "haircut": ["bob", "pixie", "layers", "fade", "undercut", "blunt-cut", "short-hair"],
    "braiding": ["box-braids", "cornrows", "knotless", "locs", "twists", "protective-style"],
    "styling": ["updo", "curls", "blowout", "waves", "volume", "bridal"],
    "nails": ["gel", "french", "nail-art", "chrome", "almond", "pastel"],
}

CITIES = [("Atlanta", "GA"), ("Houston", "TX"), ("Chicago", "IL"), ("Brooklyn", "NY")]


def random_unit_vector(rng: np.random.Generator, size: int) -> List[float]:
    """Случайный вектор единичной длины."""
    vector = rng.normal(size=size)
    return (vector / np.linalg.norm(vector)).tolist()


def generate_providers(count: int) -> List[Dict]:
    """
    Сгенерировать демо мастеров.

    Args:
        count: Количество мастеров

    Returns:
        Список словарей с данными мастеров
    """
    providers = []
    for i in range(count):
        city, state = random.choice(CITIES)
        providers.append({
            "provider_id": f"prov_{i:03d}",
            "provider_name": f"Studio {i:03d}",
            "provider_slug": f"studio-{i:03d}",
            "provider_logo_url": f"https://cdn.example.com/logos/studio-{i:03d}.png",
            "provider_city": city,
            "provider_state": state,
        })
    return providers


def generate_media(
    index: int,
    provider: Dict,
    rng: np.random.Generator,
) -> Tuple[Dict, Dict[str, List[float]]]:
    """
    Сгенерировать одну работу мастера: payload и векторы по фасетам.

    Returns:
        (payload, named_vectors)
    """
    category = random.choice(list(CATEGORY_TAGS))
    tags = random.sample(CATEGORY_TAGS[category], k=random.randint(2, 5))
    media_id = f"media_{index:05d}"

    payload = {
        "media_id": media_id,
        "media_url": f"https://cdn.example.com/media/{media_id}.jpg",
        "thumbnail_url": f"https://cdn.example.com/media/{media_id}_thumb.jpg",
        "service_id": f"svc_{provider['provider_id']}_{category}",
        "service_title": f"{category.replace('-', ' ').title()} by {provider['provider_name']}",
        "price": float(random.randint(40, 400)),
        "currency": "USD",
        "category": category,
        "tags": tags,
        "description": f"Demo {category} work: {', '.join(tags)}",
        "is_active": random.random() > 0.1,
        **provider,
    }
    vectors = {
        facet: random_unit_vector(rng, size)
        for facet, size in settings.facet_vector_sizes.items()
    }
    return payload, vectors


async def load_demo_media(media_count: int, provider_count: int, batch_size: int, seed: int) -> int:
    """
    Создать коллекцию и загрузить демо работы.

    Returns:
        Количество загруженных работ
    """
    random.seed(seed)
    rng = np.random.default_rng(seed)

    qdrant_manager = QdrantManager()
    try:
        await qdrant_manager.create_collection()

        providers = generate_providers(provider_count)
        loaded = 0
        for start in range(0, media_count, batch_size):
            batch = [
                generate_media(i, random.choice(providers), rng)
                for i in range(start, min(start + batch_size, media_count))
            ]
            payloads = [payload for payload, _ in batch]
            vectors = [named for _, named in batch]
            await qdrant_manager.upsert_media(payloads, vectors)
            loaded += len(batch)
            logger.info(f"Загружено {loaded}/{media_count}")

        total = await qdrant_manager.count_vectors()
        logger.success(f"✅ Готово: {loaded} работ загружено, в коллекции {total} точек")
        return loaded
    finally:
        qdrant_manager.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load demo service media into Qdrant")
    parser.add_argument("--media", type=int, default=500, help="Number of media items")
    parser.add_argument("--providers", type=int, default=40, help="Number of providers")
    parser.add_argument("--batch-size", type=int, default=100, help="Upsert batch size")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    asyncio.run(load_demo_media(args.media, args.providers, args.batch_size, args.seed))


if __name__ == "__main__":
    main()

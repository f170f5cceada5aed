"""Slug generation for goal URLs."""
import re


def slugify(text: str) -> str:
    """
    Convert a goal title to a URL-safe slug.

    Examples:
        >>> slugify("Ship the MVP")
        'ship-the-mvp'
        >>> slugify("Q3: Launch Beta!")
        'q3-launch-beta'
    """
    slug = re.sub(r"[^\w\s-]", "", text.lower().strip())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug or "goal"


async def generate_unique_slug(
    collection,
    base_slug: str,
    user_id: str,
    exclude_id=None,
) -> str:
    """
    Pick base_slug, or base_slug-N with the lowest free N >= 2.

    Looks up every slug sharing the prefix in one query instead of probing
    candidates one at a time.

    Args:
        collection: Goals collection
        base_slug: Slug derived from the title
        user_id: Slugs are unique per user
        exclude_id: Document being renamed, which may keep its own slug

    Returns:
        Unique slug string
    """
    query = {
        "user_id": user_id,
        "slug": {"$regex": f"^{re.escape(base_slug)}(-\\d+)?$"},
    }
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}

    cursor = collection.find(query, {"slug": 1})
    taken = {doc["slug"] for doc in await cursor.to_list(length=None)}

    return next_free_slug(base_slug, taken)


def next_free_slug(base_slug: str, taken: set[str]) -> str:
    """
    Examples:
        >>> next_free_slug("ship", set())
        'ship'
        >>> next_free_slug("ship", {"ship", "ship-2"})
        'ship-3'
    """
    if base_slug not in taken:
        return base_slug

    suffix = 2
    while f"{base_slug}-{suffix}" in taken:
        suffix += 1
    return f"{base_slug}-{suffix}"

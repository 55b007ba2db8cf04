"""Category metadata shared by scanners."""

from __future__ import annotations

from dataclasses import dataclass

SAFETY_LEVELS = ("safe", "moderate", "risky")


@dataclass(frozen=True)
class Category:
    """Static description of a family of removable files."""

    id: str
    name: str
    group: str
    safety_level: str = "safe"
    safety_note: str | None = None

    def __post_init__(self) -> None:
        if self.safety_level not in SAFETY_LEVELS:
            raise ValueError(f"Unknown safety level for '{self.id}': {self.safety_level}")

    @property
    def is_risky(self) -> bool:
        return self.safety_level == "risky"


CATEGORIES: dict[str, Category] = {
    category.id: category
    for category in (
        Category("temp-files", "Temporary Files", "System", "safe"),
        Category("trash", "Trash", "System", "safe"),
        Category("thumbnails", "Thumbnails", "System", "safe"),
        Category(
            "user-cache",
            "User Cache",
            "System",
            "moderate",
            "Applications rebuild these caches, the first start may be slower.",
        ),
        Category(
            "dev-cache",
            "Development Caches",
            "Development",
            "moderate",
            "Package managers will download dependencies again on the next build.",
        ),
        Category(
            "docker",
            "Docker",
            "Development",
            "moderate",
            "Removes unused images, stopped containers and build cache.",
        ),
        Category(
            "downloads",
            "Old Downloads",
            "Storage",
            "risky",
            "Files in Downloads are personal data. Review before deleting.",
        ),
        Category(
            "large-files",
            "Large Files",
            "Storage",
            "risky",
            "Large files may be important. Review each item before deleting.",
        ),
        Category(
            "duplicates",
            "Duplicate Files",
            "Storage",
            "risky",
            "Keeps the newest copy of each file and removes the older ones.",
        ),
    )
}

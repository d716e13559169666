"""
Dungeon Generation API Routes.

Handles procedural dungeon level generation and one-off item rolls.
"""
from fastapi import APIRouter, Query
from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional

from dungeon_loop.config import get_settings
from dungeon_loop.core.errors import ValidationError
from dungeon_loop.core.random_provider import RandomProvider
from dungeon_loop.core.dungeon import (
    Biome,
    ItemCategory,
    LootTableResolver,
    build_generation_config,
    generate_dungeon,
)
from dungeon_loop.core.dungeon.biomes import DUNGEON_BIOMES

router = APIRouter(prefix="/dungeons", tags=["dungeons"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class GenerateDungeonRequest(BaseModel):
    """Request to generate a dungeon level."""
    dungeon_id: str = Field(default="sword_forest", description="Dungeon identifier")
    difficulty: int = Field(default=1, ge=1, description="Difficulty level")
    seed: Optional[int] = Field(default=None, description="Random seed")
    room_count: Optional[int] = Field(default=None, ge=1, le=60, description="Rooms to attempt")


class DungeonResponse(BaseModel):
    """Response containing generated dungeon data."""
    success: bool
    dungeon: Dict[str, Any]
    summary: Dict[str, Any]
    message: str = ""


class BiomesResponse(BaseModel):
    """Response listing known dungeons and their biome tuning."""
    success: bool
    biomes: List[Dict[str, Any]]


class GenerateItemRequest(BaseModel):
    """Request to roll a single item."""
    difficulty: int = Field(default=1, ge=1, description="Difficulty level")
    category: Optional[str] = Field(default=None, description="weapon, armor, accessory or consumable")
    treasure: bool = Field(default=False, description="Use the treasure rarity table")
    seed: Optional[int] = Field(default=None, description="Random seed")


class ItemResponse(BaseModel):
    """Response containing one generated item."""
    success: bool
    item: Dict[str, Any]
    seed: int


# =============================================================================
# HELPERS
# =============================================================================

def _check_difficulty(difficulty: int) -> None:
    max_difficulty = get_settings().MAX_DIFFICULTY
    if difficulty > max_difficulty:
        raise ValidationError(
            "difficulty",
            f"Difficulty must be at most {max_difficulty}",
            difficulty
        )


def _resolve_seed(seed: Optional[int]) -> Optional[int]:
    return seed if seed is not None else get_settings().DEFAULT_SEED


def _build_response(dungeon_id: str, difficulty: int, seed: Optional[int], room_count: Optional[int]):
    _check_difficulty(difficulty)
    dungeon = generate_dungeon(
        dungeon_id,
        difficulty,
        seed=_resolve_seed(seed),
        room_count=room_count,
    )
    summary = dungeon.summary()
    return DungeonResponse(
        success=True,
        dungeon=dungeon.to_dict(),
        summary=summary,
        message=(
            f"Generated {dungeon.biome.value} dungeon with {summary['total_rooms']} rooms "
            f"at difficulty {difficulty}"
        ),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/generate", response_model=DungeonResponse)
async def generate(request: GenerateDungeonRequest):
    """
    Generate a procedural dungeon level.

    Creates a connected graph of rooms with:
    - Entrance, boss and special rooms
    - Monsters, chests, merchants and shrines
    - Traps and biome hazards

    The same dungeon id, difficulty and seed always give the same level.
    """
    return _build_response(request.dungeon_id, request.difficulty, request.seed, request.room_count)


@router.get("/generate", response_model=DungeonResponse)
async def generate_get(
    dungeon_id: str = Query(default="sword_forest"),
    difficulty: int = Query(default=1, ge=1),
    seed: Optional[int] = Query(default=None),
    room_count: Optional[int] = Query(default=None, ge=1, le=60),
):
    """
    Generate a procedural dungeon level (GET version for convenience).
    """
    return _build_response(dungeon_id, difficulty, seed, room_count)


@router.get("/biomes", response_model=BiomesResponse)
async def list_biomes(difficulty: int = Query(default=1, ge=1)):
    """List known dungeon ids with their biome tuning at a difficulty."""
    biomes = []
    for dungeon_id, biome in DUNGEON_BIOMES.items():
        biomes.append({
            "dungeon_id": dungeon_id,
            "config": build_generation_config(biome, difficulty).to_dict(),
        })
    biomes.append({
        "dungeon_id": None,
        "config": build_generation_config(Biome.GENERIC, difficulty).to_dict(),
    })
    return BiomesResponse(success=True, biomes=biomes)


@router.post("/items", response_model=ItemResponse)
async def generate_item(request: GenerateItemRequest):
    """Roll one item the way dungeon loot is rolled."""
    _check_difficulty(request.difficulty)

    category = None
    if request.category:
        try:
            category = ItemCategory(request.category.lower())
        except ValueError:
            raise ValidationError(
                "category",
                f"Unknown item category: {request.category}",
                request.category
            )

    rng = RandomProvider(_resolve_seed(request.seed))
    item = LootTableResolver(rng).create_item(
        request.difficulty,
        category=category,
        treasure=request.treasure,
    )
    return ItemResponse(success=True, item=item.to_dict(), seed=rng.seed)

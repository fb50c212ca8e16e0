"""
Starter Content Bundle for Tideline.

A small but complete bundle for playing immediately and for tests:
- Two regions (a level-1 shore and a level-3 reef)
- Three fish, one still authored in the combat-era maxHp/attack shape
- Canonical actions plus two legacy combat actions
- Passive, active and reactive skills covering every effect kind
- A camp shop selling items and rig mods
- Two contracts

Records are written as the content editor exports them: camelCase keys,
ids taken from the dictionary key.
"""

from __future__ import annotations

from typing import Any

from tideline.models.content import ContentBundle, load_content

STARTER_BUNDLE: dict[str, Any] = {
    "contentVersion": "0.1.0",
    "xpCurve": {"base": 40, "growth": 1.22},
    "regions": {
        "shore_1": {
            "name": "Shallow Shore",
            "requiredLevel": 1,
            "encounterPool": [
                {"enemyId": "minnow", "weight": 3},
                {"enemyId": "bass", "weight": 1},
            ],
        },
        "reef_2": {
            "name": "Kelp Reef",
            "requiredLevel": 3,
            "encounterPool": [
                {"enemyId": "bass", "weight": 2},
                {"enemyId": "scrapjaw", "weight": 1},
            ],
        },
    },
    "enemies": {
        "minnow": {"name": "River Minnow", "xp": 20, "stamina": 80, "pressure": 10},
        "bass": {"name": "Striped Bass", "xp": 35, "stamina": 120, "pressure": 14},
        # Older export, still in the combat shape
        "scrapjaw": {"name": "Scrapjaw", "xp": 60, "maxHp": 150, "attack": 18},
    },
    "actions": {
        "reel": {"label": "Reel", "kind": "reel", "staminaDelta": -20, "tensionDelta": 12},
        "brace": {"label": "Brace", "kind": "brace", "tensionDelta": -10},
        "adjust": {"label": "Adjust Drag", "kind": "adjust", "tensionDelta": -6},
        "power_reel": {
            "label": "Power Reel",
            "kind": "technique",
            "staminaDelta": -32,
            "tensionDelta": 20,
        },
        "strike": {"label": "Strike", "kind": "attack", "damage": 18, "focusCost": 10},
        "breathe": {"label": "Breathe", "kind": "utility", "focusGain": 15, "timing": "none"},
    },
    "items": {
        "patch_kit": {"label": "Line Patch Kit", "integrityRestore": 25},
        "calm_tea": {"label": "Calming Tea", "tensionReduce": 20},
        "small_potion": {"label": "Small Potion", "heal": 20},
    },
    "skills": {
        "steady_hands": {
            "label": "Steady Hands",
            "type": "PASSIVE",
            "maxRank": 3,
            "effects": [{"kind": "WEAR_MULT", "mult": 0.85}],
        },
        "drag_sense": {
            "label": "Drag Sense",
            "type": "PASSIVE",
            "maxRank": 2,
            "effects": [{"kind": "FISH_TENSION_MULT", "mult": 0.9}],
        },
        "soft_touch": {
            "label": "Soft Touch",
            "type": "PASSIVE",
            "effects": [{"kind": "RELIEF_BONUS", "add": 2}],
        },
        "anchor_stance": {
            "label": "Anchor Stance",
            "type": "REACTIVE",
            "maxRank": 2,
            "effects": [
                {"kind": "BRACE_BONUS", "add": 3},
                {"kind": "CONTROL_ON_BRACE", "add": 1},
            ],
        },
        "power_reel_training": {
            "label": "Power Reel Training",
            "type": "ACTIVE",
            "requiredLevel": 2,
            "grantsActions": ["power_reel"],
        },
        "clean_hook": {
            "label": "Clean Hook",
            "type": "REACTIVE",
            "requiredLevel": 2,
            "effects": [{"kind": "NEGATE_WEAR_ON_PERFECT"}],
        },
        "redline_focus": {
            "label": "Redline Focus",
            "type": "REACTIVE",
            "requiredLevel": 3,
            "requires": ["anchor_stance"],
            "effects": [{"kind": "CONTROL_ON_TENSION", "threshold": 70, "add": 2}],
        },
        "finisher": {
            "label": "Finisher",
            "type": "PASSIVE",
            "requiredLevel": 4,
            "maxRank": 2,
            "effects": [{"kind": "EXHAUSTED_BLEED", "add": 4}],
        },
    },
    "rigMods": {
        "braided_line": {
            "label": "Braided Line",
            "effects": [{"kind": "STAT_BONUS", "stat": "durability", "add": 4}],
        },
        "drag_washer": {
            "label": "Carbon Drag Washer",
            "effects": [{"kind": "FISH_TENSION_MULT", "mult": 0.9}],
        },
        "shock_leader": {
            "label": "Shock Leader",
            "effects": [{"kind": "INTEGRITY_WEAR_MULT", "mult": 0.8}],
        },
    },
    "shops": {
        "camp_shop": {
            "label": "Camp Tackle",
            "stock": [
                {"kind": "ITEM", "id": "patch_kit_1", "itemId": "patch_kit", "price": 15},
                {"kind": "ITEM", "id": "calm_tea_2", "itemId": "calm_tea", "price": 12, "amount": 2},
                {"kind": "RIG_MOD", "id": "braided_line", "modId": "braided_line", "price": 40},
                {"kind": "RIG_MOD", "id": "drag_washer", "modId": "drag_washer", "price": 35},
                {"kind": "RIG_MOD", "id": "shock_leader", "modId": "shock_leader", "price": 45},
            ],
        },
    },
    "contracts": {
        "shore_run": {
            "label": "Shoreline Run",
            "description": "A few easy catches along the shore.",
            "regionId": "shore_1",
            "encounterCount": {"min": 2, "max": 3},
            "camp": {"shopId": "camp_shop"},
            "rewards": {"currency": {"min": 40, "max": 60}},
            "rewardsPerFight": {"currency": {"min": 10, "max": 20}},
        },
        "reef_bounty": {
            "label": "Scrapjaw Bounty",
            "description": "The reef's scrapjaws are chewing through nets.",
            "regionId": "reef_2",
            "encounterCount": {"min": 3, "max": 4},
            "encounterPool": [{"enemyId": "scrapjaw", "weight": 1}],
            "camp": {"shopId": "camp_shop"},
            "rewards": {"currency": {"min": 120, "max": 160}},
            "rewardsPerFight": {"currency": {"min": 25, "max": 35}},
        },
    },
    "loadout": {
        "startActions": ["reel", "brace", "adjust"],
        "startItems": {"patch_kit": 2, "calm_tea": 1},
    },
    "economy": {"startingCurrency": 25, "defaultShopId": "camp_shop"},
}


def load_starter_bundle() -> ContentBundle:
    """Load the starter bundle as a validated ContentBundle."""
    return load_content(STARTER_BUNDLE)

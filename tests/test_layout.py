import math
import random

from sticker_engine import StickerLayoutConfig, Viewport, Zone, compute_layout, target_count
from sticker_engine.geometry import box_around
from sticker_engine.layout import StickerLayoutEngine, base_scale, grid_shape


def assert_valid(placements, exclusion_zones, safe_zone):
    for placed in placements:
        cx, cy = placed.center_x_pct, placed.center_y_pct
        assert 0 <= cx <= 100
        assert 0 <= cy <= 100
        box = box_around(cx, cy, placed.width_pct, placed.height_pct)
        for zone in exclusion_zones:
            assert not box.overlaps(zone)
        if safe_zone is not None:
            strictly_inside = (safe_zone.x_min < cx < safe_zone.x_max and
                               safe_zone.y_min < cy < safe_zone.y_max)
            assert not strictly_inside


def test_reference_viewport_places_every_slot_with_cyclic_items(items, reference_config):
    viewport = Viewport(1920, 1080)
    assert target_count(viewport, reference_config) == 20

    placements = compute_layout(items, viewport, config=reference_config, rng=random.Random(42))

    assert len(placements) == 20
    for i, placed in enumerate(placements):
        assert placed.item == items[i % 3]
    assert all(placements[i].item.id == 0 for i in (0, 3, 6, 9, 12, 15, 18))


def test_full_viewport_safe_zone_blocks_everything(items, reference_config):
    safe_zone = Zone(0, 100, 0, 100)
    placements = compute_layout(items * 5, Viewport(1920, 1080), safe_zone=safe_zone,
                                config=reference_config, rng=random.Random(1))
    assert placements == []


def test_full_viewport_exclusion_zone_blocks_everything(items, reference_config):
    placements = compute_layout(items, Viewport(1280, 720), [Zone(-5, 105, -5, 105)],
                                config=reference_config, rng=random.Random(3))
    assert placements == []


def test_empty_catalog_yields_empty_layout(reference_config):
    assert compute_layout([], Viewport(1920, 1080), config=reference_config) == []


def test_randomized_zones_are_respected(items):
    config = StickerLayoutConfig()
    meta = random.Random(2024)

    for seed in range(60):
        viewport = Viewport(meta.uniform(320, 3840), meta.uniform(480, 2160))
        zones = []
        for _ in range(meta.randint(0, 4)):
            x0, y0 = meta.uniform(0, 90), meta.uniform(0, 90)
            zones.append(Zone(x0, x0 + meta.uniform(2, 30), y0, y0 + meta.uniform(2, 30)))
        safe_zone = None
        if meta.random() < 0.5:
            safe_zone = Zone(30, 70, 20, 80)

        placements = compute_layout(items, viewport, zones, safe_zone,
                                    config=config, rng=random.Random(seed))

        assert len(placements) <= target_count(viewport, config)
        assert_valid(placements, zones, safe_zone)


def test_different_seeds_both_satisfy_invariants(items, reference_config):
    viewport = Viewport(1440, 900)
    zones = [Zone(40, 60, 0, 15)]
    safe_zone = Zone(25, 75, 25, 75)
    bound = target_count(viewport, reference_config)

    first = compute_layout(items, viewport, zones, safe_zone, reference_config, random.Random(1))
    second = compute_layout(items, viewport, zones, safe_zone, reference_config, random.Random(2))

    assert len(first) <= bound
    assert len(second) <= bound
    assert_valid(first, zones, safe_zone)
    assert_valid(second, zones, safe_zone)
    assert [p.center_x_pct for p in first] != [p.center_x_pct for p in second]


def test_same_seed_is_reproducible(items, reference_config):
    viewport = Viewport(1024, 768)
    first = compute_layout(items, viewport, config=reference_config, rng=random.Random(9))
    second = compute_layout(items, viewport, config=reference_config, rng=random.Random(9))
    assert first == second


def test_target_count_is_monotonic_in_area():
    config = StickerLayoutConfig()
    for width in range(200, 4000, 97):
        small = Viewport(width, width * 9 / 16)
        large = Viewport(width * math.sqrt(2), width * math.sqrt(2) * 9 / 16)
        assert target_count(large, config) >= target_count(small, config)
        assert target_count(small, config) >= config.min_count


def test_target_count_bounds():
    config = StickerLayoutConfig()
    assert target_count(Viewport(320, 480), config) == config.min_count
    assert target_count(Viewport(16000, 9000), config) == config.max_count


def test_base_scale_is_clamped():
    config = StickerLayoutConfig()
    assert base_scale(Viewport(320, 480), config) == config.min_scale
    assert base_scale(Viewport(7680, 4320), config) == config.max_scale
    assert base_scale(Viewport(1920, 1080), config) == 1.2


def test_item_scale_stays_within_jitter_band(items, reference_config):
    viewport = Viewport(1920, 1080)
    scale = base_scale(viewport, reference_config)
    placements = compute_layout(items, viewport, config=reference_config, rng=random.Random(5))
    for placed in placements:
        assert scale * 0.8 <= placed.scale <= scale * 1.2
        assert -30 <= placed.rotation_deg <= 30


def test_grid_has_enough_cells():
    for count in (1, 7, 20, 33, 80):
        for aspect in (0.5, 1.0, 16 / 9, 3.0):
            rows, cols = grid_shape(count, aspect)
            assert rows * cols >= count
    assert grid_shape(20, 16 / 9) == (4, 5)
    assert grid_shape(0, 1.0) == (0, 0)


def test_anchor_is_top_left_of_footprint(items, reference_config):
    placements = compute_layout(items, Viewport(1920, 1080), config=reference_config,
                                rng=random.Random(11))
    placed = placements[0]
    assert math.isclose(placed.x_pct, placed.center_x_pct - placed.width_pct / 2)
    assert math.isclose(placed.y_pct, placed.center_y_pct - placed.height_pct / 2)
    # 150px at the placed scale, as a share of 1920px
    assert math.isclose(placed.width_pct, 150 * placed.scale / 1920 * 100)


def test_exhausted_grid_drops_remaining_slots(items, reference_config):
    # Block the left 80% of the screen; only the rightmost grid column is usable
    zones = [Zone(-10, 80, -10, 110)]
    placements = compute_layout(items, Viewport(1920, 1080), zones,
                                config=reference_config, rng=random.Random(8))
    assert len(placements) < 20
    assert_valid(placements, zones, None)


def test_renderer_payload(items, reference_config):
    placed = compute_layout(items, Viewport(1920, 1080), config=reference_config,
                            rng=random.Random(4))[0]
    payload = placed.to_dict()
    assert payload["image"] == "snowflake.png"
    assert payload["left"] == f"{placed.x_pct}%"
    assert payload["top"].endswith("%")
    assert payload["scale"] == placed.scale


def test_engine_layout_info(reference_config):
    engine = StickerLayoutEngine(reference_config, random.Random(0))
    info = engine.get_layout_info(Viewport(1920, 1080))
    assert info["target_count"] == 20
    assert info["grid"] == {"rows": 4, "cols": 5}


def test_each_grid_cell_is_used_at_most_once(items, reference_config):
    # Zones reject many candidates, so most slots walk past several cells
    zones = [Zone(-10, 45, -10, 40), Zone(60, 110, 70, 110)]
    safe_zone = Zone(35, 65, 35, 65)

    for seed in range(25):
        viewport = Viewport(1920, 1080) if seed % 2 else Viewport(2560, 1440)
        rows, cols = grid_shape(target_count(viewport, reference_config), viewport.aspect_ratio)
        cell_w, cell_h = 100 / cols, 100 / rows

        placements = compute_layout(items, viewport, zones, safe_zone,
                                    config=reference_config, rng=random.Random(seed))

        cells = [(int(p.center_y_pct // cell_h), int(p.center_x_pct // cell_w))
                 for p in placements]
        assert len(cells) == len(set(cells))
        assert all(0 <= row < rows and 0 <= col < cols for row, col in cells)

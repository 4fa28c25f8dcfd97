from velogiro.presets import (
    BIKE_PRESETS,
    POWER_DISTRIBUTIONS,
    distribution_id_for_watts,
    get_bike_preset,
    rider_type_label,
    target_watts,
)


class TestBikePresets:
    def test_gravel_values(self):
        preset = get_bike_preset("gravel")
        assert (preset.crr, preset.cda, preset.efficiency) == (0.006, 0.36, 0.96)

    def test_unknown_type_falls_back_to_gravel(self):
        assert get_bike_preset("tandem") is BIKE_PRESETS["gravel"]

    def test_race_is_most_efficient(self):
        race = get_bike_preset("race")
        for preset in BIKE_PRESETS.values():
            assert race.crr <= preset.crr
            assert race.cda <= preset.cda


class TestPowerDistributions:
    def test_maps_watts_to_class(self):
        assert distribution_id_for_watts(60) == "sedentary"
        assert distribution_id_for_watts(110) == "commuter"
        assert distribution_id_for_watts(160) == "recreational"
        assert distribution_id_for_watts(260) == "amateur"
        assert distribution_id_for_watts(320) == "pro"

    def test_outside_ranges_is_custom(self):
        assert distribution_id_for_watts(20) == "custom"
        assert distribution_id_for_watts(0) == "custom"

    def test_rider_type_label(self):
        sedentary = next(d for d in POWER_DISTRIBUTIONS if d.id == "sedentary")
        assert rider_type_label(70) == sedentary.label
        assert rider_type_label(170) == "Recreational cyclist"
        assert rider_type_label(40) == "Custom rider"

    def test_target_watts_midpoint(self):
        assert target_watts("recreational") == 150
        assert target_watts("amateur") == 230

    def test_target_watts_open_ended(self):
        assert target_watts("pro") == 280

    def test_target_watts_unknown(self):
        assert target_watts("custom") is None

    def test_targets_fall_in_their_class(self):
        for distribution in POWER_DISTRIBUTIONS:
            assert distribution_id_for_watts(target_watts(distribution.id)) == distribution.id

import pytest

from vicstats.engine.demand import analyse_selection
from vicstats.utils.assets import StatData, build_stat_tables
from vicstats.utils.constants import STAT_RECORD_IDS, Sections


class TestAnalyseSelection:
    def test_splits_markers_from_stats(self):
        demand = analyse_selection({
            "stats": {"weekly": {"totalDeaths": {}, "week": {}, "updated": {}}}
        })

        weekly = demand[Sections.weekly]
        assert weekly.selected
        assert weekly.markers == {"week", "updated"}
        assert weekly.stats == {"totalDeaths"}
        assert [section.section for section in demand.selected_sections] == [Sections.weekly]

    def test_same_stat_name_in_two_sections(self):
        demand = analyse_selection({
            "stats": {
                "daily": {"newCases": True},
                "weekly": {"newCases": True}
            }
        })

        assert demand.record_ids == sorted([
            STAT_RECORD_IDS[Sections.daily]["newCases"],
            STAT_RECORD_IDS[Sections.weekly]["newCases"],
        ])

    def test_nested_vax_sections(self):
        demand = analyse_selection({
            "stats": {
                "vax": {
                    "percentages": {"dose1": {}, "updated": {}},
                    "totals": {"week": {}}
                }
            }
        })

        assert demand[Sections.vax_percentages].markers == {"updated"}
        assert demand[Sections.vax_percentages].stats == {"dose1"}
        assert demand[Sections.vax_totals].markers == {"week"}
        assert demand[Sections.vax_totals].stats == set()
        assert demand.record_ids == [STAT_RECORD_IDS[Sections.vax_percentages]["dose1"]]

    def test_unknown_names_are_ignored(self):
        demand = analyse_selection({
            "stats": {
                "weekly": {"totalDeaths": True, "notAStat": True},
                "monthly": {"newCases": True}
            },
            "somethingElse": {"updated": True}
        })

        assert demand[Sections.weekly].stats == {"totalDeaths"}
        assert [section.section for section in demand.selected_sections] == [Sections.weekly]

    def test_marker_names_are_section_specific(self):
        # ``week`` is not published for the daily section.
        demand = analyse_selection({"stats": {"daily": {"week": True, "updated": True}}})

        assert demand[Sections.daily].markers == {"updated"}

    def test_false_and_none_leaves_are_not_requested(self):
        demand = analyse_selection({
            "stats": {
                "weekly": {
                    "totalDeaths": True,
                    "activeCases": False,
                    "week": None,
                    "updated": {},
                }
            },
            "exposureSites": {"count": False},
        })

        assert demand[Sections.weekly].stats == {"totalDeaths"}
        assert demand[Sections.weekly].markers == {"updated"}
        assert demand[Sections.exposure_sites].is_empty
        assert demand.record_ids == [STAT_RECORD_IDS[Sections.weekly]["totalDeaths"]]

    @pytest.mark.parametrize("value", [False, None])
    def test_unselected_sections(self, value):
        demand = analyse_selection({
            "stats": {"weekly": value, "daily": {"newCases": True}, "vax": value},
            "vaccinationStats": value,
        })

        assert [section.section for section in demand.selected_sections] == [Sections.daily]

    def test_section_without_fields(self):
        demand = analyse_selection({"stats": {"weekly": {}}})

        assert demand[Sections.weekly].selected
        assert demand[Sections.weekly].is_empty
        assert demand.record_ids == []

    def test_top_level_sections(self):
        demand = analyse_selection({
            "exposureSites": {"count": True},
            "vaccinationStats": {"updated": True, "vaxRateDelta": True}
        })

        assert demand[Sections.exposure_sites].stats == {"count"}
        assert demand[Sections.vaccination].markers == {"updated"}
        assert demand[Sections.vaccination].stats == {"vaxRateDelta"}
        # Neither is backed by the statistics blocks.
        assert demand.record_ids == []

    @pytest.mark.parametrize("selection", [None, [], "stats.weekly", 42])
    def test_non_mapping_selection_is_empty(self, selection):
        demand = analyse_selection(selection)

        assert demand.selected_sections == []
        assert demand.record_ids == []

    def test_as_log(self):
        demand = analyse_selection({"stats": {"weekly": {"week": 1, "totalDeaths": 1}}})

        assert demand.as_log() == {
            Sections.weekly: {"markers": ["week"], "stats": ["totalDeaths"]}
        }


class TestStatTables:
    def test_round_trip(self):
        for (section, stat), record_id in StatData.to_record_id.items():
            assert StatData.from_record_id[record_id] == (section, stat)

        assert len(StatData.to_record_id) == len(StatData.from_record_id)
        assert len(StatData.to_record_id) == sum(map(len, STAT_RECORD_IDS.values()))

    def test_known_record(self):
        record_id = "69a44e8d-e04b-4c9a-ad7e-4dda9c662ad2"

        assert StatData.to_record_id[Sections.weekly, "totalDeaths"] == record_id
        assert StatData.from_record_id[record_id] == (Sections.weekly, "totalDeaths")

    def test_duplicate_record_id_is_rejected(self):
        table = {
            "stats.daily": {"newCases": "same-id"},
            "stats.weekly": {"newCases": "same-id"},
        }

        with pytest.raises(ValueError, match="same-id"):
            build_stat_tables(table)

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            StatData.to_record_id[Sections.weekly, "totalDeaths"] = "other"

        with pytest.raises(TypeError):
            StatData.from_record_id["other"] = (Sections.weekly, "totalDeaths")

    def test_intermediate_paths(self):
        assert StatData.intermediate_paths == {"stats", "stats.vax"}

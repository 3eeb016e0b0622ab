"""
Tests for reading the punctuality export and repairing it.
"""

import pandas as pd
import pytest

from data_loader import DataLoader
from data_cleaner import DataCleaner
from conftest import HEADER, NEXT_DAY, RAW_ROWS, _row, write_rows


class TestDataLoader:
    def test_typed_read_leaves_rollover_time_unparsed(self, raw_csv, logger):
        typed = DataLoader(raw_csv, logger).load_typed()
        halle = typed[typed['PTCAR_LG_NM_NL'] == 'HALLE'].iloc[0]
        assert pd.isna(halle['planned_dep'])
        assert halle['real_dep'] == pd.Timestamp('2023-01-10 00:01:10')
        logger.parse_failures.assert_called_once_with('planned_dep', 1)

    def test_text_read_keeps_original_strings(self, raw_csv, logger):
        text = DataLoader(raw_csv, logger).load_text()
        assert text.loc[text['PTCAR_LG_NM_NL'] == 'HALLE', 'PLANNED_TIME_DEP'].iloc[0] == '24:00:30'
        assert text['DELAY_DEP'].dropna().map(type).eq(str).all()

    def test_load_returns_both_copies(self, raw_csv, logger):
        typed, text = DataLoader(raw_csv, logger).load()
        assert len(typed) == len(text) == len(RAW_ROWS)
        assert pd.api.types.is_datetime64_any_dtype(typed['planned_arr'])
        assert pd.api.types.is_numeric_dtype(typed['DELAY_ARR'])

    def test_missing_columns_fail_fast(self, tmp_path, logger):
        path = tmp_path / 'broken.csv'
        pd.DataFrame(RAW_ROWS, columns=HEADER).drop(columns=['DELAY_DEP']).to_csv(path, sep=';', index=False)
        with pytest.raises(ValueError) as excinfo:
            DataLoader(path, logger).load_typed()
        assert 'DELAY_DEP' in str(excinfo.value)

    def test_unreachable_source_is_fatal(self, tmp_path, logger):
        with pytest.raises(FileNotFoundError):
            DataLoader(tmp_path / 'missing.csv', logger).load()


class TestDataCleaner:
    @pytest.fixture
    def frames(self, raw_csv, logger):
        return DataLoader(raw_csv, logger).load()

    def test_repair_targets_are_unparsed_but_present(self, frames, logger):
        typed, text = frames
        targets = DataCleaner(logger).find_repair_targets(typed, text)
        assert targets.sum() == 1
        assert text.loc[targets, 'PTCAR_LG_NM_NL'].tolist() == ['HALLE']

    def test_repair_equals_actual_departure_minus_delay(self, frames, logger):
        typed, text = frames
        cleaner = DataCleaner(logger)
        targets = cleaner.find_repair_targets(typed, text)
        repaired = cleaner.repair_planned_departure(typed, text)

        expected = repaired.loc[targets, 'real_dep'] - pd.to_timedelta(repaired.loc[targets, 'DELAY_DEP'], unit='s')
        assert (repaired.loc[targets, 'planned_dep'] == expected).all()
        assert repaired.loc[targets, 'planned_dep'].iloc[0] == pd.Timestamp('2023-01-10 00:00:30')

    def test_repair_keeps_every_row_and_leaves_no_parse_gaps(self, frames, logger):
        typed, text = frames
        repaired = DataCleaner(logger).repair_planned_departure(typed, text)
        assert len(repaired) == len(typed)
        # only the destination, which never had a departure, stays empty
        assert repaired['planned_dep'].isna().sum() == text['PLANNED_TIME_DEP'].isna().sum() == 1
        assert typed['planned_dep'].isna().sum() == 2

    def test_repair_does_not_touch_input(self, frames, logger):
        typed, text = frames
        DataCleaner(logger).repair_planned_departure(typed, text)
        assert typed['planned_dep'].isna().sum() == 2

    def test_filter_drops_pass_through_only(self, frames, logger):
        typed, text = frames
        cleaner = DataCleaner(logger)
        kept = cleaner.filter_stops(cleaner.repair_planned_departure(typed, text))

        assert 'AALST' not in set(kept['PTCAR_LG_NM_NL'])
        assert {'GENT-SINT-PIETERS', 'ANTWERPEN-CENTRAAL'} <= set(kept['PTCAR_LG_NM_NL'])
        both = kept['planned_arr'].notna() & kept['planned_dep'].notna()
        assert (kept.loc[both, 'planned_arr'] != kept.loc[both, 'planned_dep']).all()

    def test_clean_renames_columns(self, frames, logger):
        typed, text = frames
        df = DataCleaner(logger).clean(typed, text)
        for col in ['id', 'operator', 'relation', 'station', 'delay_in', 'delay_out']:
            assert col in df.columns
        assert len(df) == len(RAW_ROWS) - 1


class TestMidnightTimes:
    @pytest.fixture
    def cleaner(self, logger):
        return DataCleaner(logger)

    def _clean(self, tmp_path, logger, cleaner, rows):
        typed, text = DataLoader(write_rows(tmp_path / 'midnight.csv', rows), logger).load()
        return cleaner.clean(typed, text)

    def test_arrival_written_past_midnight_is_repaired(self, tmp_path, logger, cleaner):
        rows = [_row(600, 'IC 01', 'HALLE', '24:00:10', '24:01:00', '00:00:50', '00:01:40', 40, 40,
                     real_arr_date=NEXT_DAY, real_dep_date=NEXT_DAY)]
        df = self._clean(tmp_path, logger, cleaner, rows)
        assert len(df) == 1
        stop = df.iloc[0]
        assert stop['planned_arr'] == pd.Timestamp('2023-01-10 00:00:10')
        assert stop['planned_dep'] == pd.Timestamp('2023-01-10 00:01:00')
        assert stop['planned_arr'] == stop['real_arr'] - pd.Timedelta(seconds=stop['delay_in'])

    def test_pass_through_past_midnight_is_dropped(self, tmp_path, logger, cleaner):
        rows = [
            _row(500, 'L 26', 'HALLE', '24:00:10', '24:00:10', '00:00:50', '00:00:50', 40, 40,
                 real_arr_date=NEXT_DAY, real_dep_date=NEXT_DAY),
            _row(501, 'L 26', 'LEMBEEK', '23:40:00', '23:41:00', '23:40:20', '23:41:20', 20, 20),
        ]
        df = self._clean(tmp_path, logger, cleaner, rows)
        assert df['station'].tolist() == ['LEMBEEK']

    def test_pass_through_kept_out_even_without_actual_times(self, tmp_path, logger, cleaner):
        # unparseable on both sides and nothing to repair from
        rows = [_row(502, 'L 26', 'HALLE', '24:00:10', '24:00:10', '', '', '', '')]
        df = self._clean(tmp_path, logger, cleaner, rows)
        assert df.empty

    def test_terminal_rows_still_kept(self, tmp_path, logger, cleaner):
        rows = [
            _row(503, 'L 26', 'HALLE', '', '24:00:10', '', '00:00:40', '', 30, real_dep_date=NEXT_DAY),
            _row(503, 'L 26', 'BRAINE', '24:20:00', '', '00:20:30', '', 30, '', real_arr_date=NEXT_DAY),
        ]
        df = self._clean(tmp_path, logger, cleaner, rows)
        assert df['station'].tolist() == ['HALLE', 'BRAINE']
        assert df['planned_dep'].iloc[0] == pd.Timestamp(f'{NEXT_DAY} 00:00:10')
        assert df['planned_arr'].iloc[1] == pd.Timestamp(f'{NEXT_DAY} 00:20:00')

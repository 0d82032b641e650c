import struct
import unittest
from datetime import date, datetime

import pandas as pd

from metastock.codec.data import DataRecord, DataSeries, decode_data_file, read_header
from metastock.codec.exceptions import CorruptHeaderError, InvalidDateError
from metastock.io.source import BufferByteSource
from metastock.tests.fixtures import data_file


class TestDecodeDataFile(unittest.TestCase):

    def test_seven_fields(self):
        """Daily rows with volume and open interest."""
        data = data_file([
            [1100104, 10.5, 11.25, 10.0, 11.0, 1500.0, 0.0],
            [1100105, 11.0, 11.5, 10.75, 11.25, 2000.0, 0.0],
        ], 7)

        series = decode_data_file(data)

        self.assertEqual(series.field_count, 7)
        self.assertEqual(len(series), 2)
        self.assertEqual(
            series.rows[0],
            DataRecord(date(2010, 1, 4), 10.5, 11.25, 10.0, 11.0, 1500.0, 0.0)
        )
        self.assertEqual(series.rows[1].timestamp, date(2010, 1, 5))
        self.assertTrue(series.has_volume)
        self.assertTrue(series.has_open_interest)
        self.assertFalse(series.is_intraday)

    def test_five_fields(self):
        """Date and OHLC only, no volume columns."""
        data = data_file([[990104, 1.5, 2.0, 1.0, 1.75]], 5)

        series = decode_data_file(data)

        self.assertEqual(series.field_count, 5)
        row = series.rows[0]
        self.assertEqual(row.timestamp, date(1999, 1, 4))
        self.assertEqual((row.open, row.high, row.low, row.close), (1.5, 2.0, 1.0, 1.75))
        self.assertIsNone(row.volume)
        self.assertIsNone(row.open_interest)
        self.assertFalse(series.has_volume)

    def test_six_fields_have_volume_only(self):
        series = decode_data_file(data_file([[20100104, 1.0, 2.0, 0.5, 1.5, 300.0]], 6))
        self.assertEqual(series.rows[0].volume, 300.0)
        self.assertIsNone(series.rows[0].open_interest)
        self.assertEqual(series.value_columns, ["open", "high", "low", "close", "volume"])

    def test_eight_fields_fold_time(self):
        """Intraday rows fold the packed time into the timestamp."""
        data = data_file([
            [20100104, 93000, 10.0, 10.5, 9.5, 10.25, 700.0, 12.0],
            [20100104, 94500, 10.25, 10.75, 10.0, 10.5, 800.0, 13.0],
        ], 8)

        series = decode_data_file(data)

        self.assertEqual(series.field_count, 8)
        self.assertTrue(series.is_intraday)
        self.assertEqual(
            series.rows[0],
            DataRecord(datetime(2010, 1, 4, 9, 30), 10.0, 10.5, 9.5, 10.25, 700.0, 12.0)
        )
        self.assertEqual(series.rows[1].timestamp, datetime(2010, 1, 4, 9, 45))

    def test_negative_prices(self):
        series = decode_data_file(data_file([[990104, -1.5, 2.0, -3.0, 0.0]], 5))
        self.assertEqual(series.rows[0].open, -1.5)
        self.assertEqual(series.rows[0].low, -3.0)
        self.assertEqual(series.rows[0].close, 0.0)

    def test_header_only(self):
        """A single (header) record yields no rows and no error."""
        series = decode_data_file(data_file([], 7))
        self.assertEqual(series.rows, ())
        self.assertEqual(series.field_count, 7)

    def test_order_is_kept(self):
        rows = [[990106, 1, 1, 1, 1], [990104, 2, 2, 2, 2], [990105, 3, 3, 3, 3]]
        series = decode_data_file(data_file(rows, 5))
        self.assertEqual([r.open for r in series.rows], [1.0, 2.0, 3.0])

    def test_byte_source_input(self):
        data = data_file([[990104, 1.5, 2.0, 1.0, 1.75]], 5)
        with BufferByteSource(data) as source:
            self.assertEqual(decode_data_file(source), decode_data_file(data))


class TestDataFileErrors(unittest.TestCase):

    def test_size_not_divisible(self):
        data = data_file([[990104, 1.5, 2.0, 1.0, 1.75]], 5)
        with self.assertRaises(CorruptHeaderError):
            decode_data_file(data + b"\x00\x00")

    def test_zero_records(self):
        data = bytearray(data_file([[990104, 1.5, 2.0, 1.0, 1.75]], 5))
        struct.pack_into("<H", data, 2, 0)
        with self.assertRaises(CorruptHeaderError):
            decode_data_file(bytes(data))

    def test_too_short(self):
        with self.assertRaises(CorruptHeaderError):
            decode_data_file(b"\x00\x00")

    def test_unsupported_field_count(self):
        data = bytearray(4 * 3 * 2)
        struct.pack_into("<H", data, 2, 2)
        with self.assertRaises(CorruptHeaderError):
            decode_data_file(bytes(data))

    def test_impossible_dates_roll_over(self):
        """Padding rows and out of range components do not fail the file."""
        series = decode_data_file(data_file([
            [990104, 1.0, 1.0, 1.0, 1.0],
            [0, 0.0, 0.0, 0.0, 0.0],
            [991399, 2.0, 2.0, 2.0, 2.0],
        ], 5))

        self.assertEqual(len(series), 3)
        self.assertEqual(series.rows[0].timestamp, date(1999, 1, 4))
        self.assertEqual(series.rows[1].timestamp, date(1899, 12, 31))
        self.assertEqual(series.rows[2].timestamp, date(2000, 4, 8))
        self.assertEqual(series.rows[2].close, 2.0)

    def test_hour_24_rolls_to_next_day(self):
        series = decode_data_file(data_file([
            [1100104, 240000, 1.0, 1.0, 1.0, 1.0, 10.0, 0.0],
            [1100104, 93060, 1.0, 1.0, 1.0, 1.0, 10.0, 0.0],
        ], 8))

        self.assertEqual(series.rows[0].timestamp, datetime(2010, 1, 5, 0, 0))
        self.assertEqual(series.rows[1].timestamp, datetime(2010, 1, 4, 9, 30))

    def test_year_out_of_range(self):
        with self.assertRaises(InvalidDateError):
            decode_data_file(data_file([[100000101, 1.0, 1.0, 1.0, 1.0]], 5))

    def test_read_header(self):
        self.assertEqual(read_header(data_file([[990104, 1, 1, 1, 1]] * 3, 5)), (4, 5))


class TestDataSeries(unittest.TestCase):

    def test_empty(self):
        series = DataSeries.empty()
        self.assertEqual(len(series), 0)
        self.assertEqual(series.field_count, 0)

    def test_to_dataframe(self):
        series = decode_data_file(data_file([
            [20100104, 93000, 10.0, 10.5, 9.5, 10.25, 700.0, 12.0],
        ], 8))

        df = series.to_dataframe()

        self.assertEqual(list(df.columns), ["open", "high", "low", "close", "volume", "open_interest"])
        self.assertEqual(df.index.name, "time")
        self.assertEqual(df.index[0], pd.Timestamp("2010-01-04 09:30:00"))
        self.assertEqual(df.iloc[0]["close"], 10.25)

    def test_empty_dataframe(self):
        df = DataSeries.empty().to_dataframe()
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), ["open", "high", "low", "close"])


if __name__ == "__main__":
    unittest.main()
